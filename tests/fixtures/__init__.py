"""Test fixture helpers."""

from __future__ import annotations

from pathlib import Path

_FIXTURE_ROOT = Path(__file__).parent

SAMPLE_FEED = "eurofxref-sample.xml"


def load_feed(name: str = SAMPLE_FEED) -> bytes:
    """Load a raw feed fixture by filename."""

    return (_FIXTURE_ROOT / name).read_bytes()


def build_feed(days: dict[str, dict[str, float]], *, namespaced: bool = True) -> bytes:
    """Render an ECB-shaped document for ``{date: {currency: rate}}``, newest first."""

    envelope_ns = ' xmlns="http://www.ecb.int/vocabulary/2002-08-01/eurofxref"' if namespaced else ""
    lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        f'<gesmes:Envelope xmlns:gesmes="http://www.gesmes.org/xml/2002-08-01"{envelope_ns}>',
        "<gesmes:subject>Reference rates</gesmes:subject>",
        "<Cube>",
    ]
    for day in sorted(days, reverse=True):
        lines.append(f'<Cube time="{day}">')
        for code, rate in days[day].items():
            lines.append(f'<Cube currency="{code}" rate="{rate}"/>')
        lines.append("</Cube>")
    lines.extend(["</Cube>", "</gesmes:Envelope>"])
    return "\n".join(lines).encode("utf-8")
