"""
CO severity bands.

Bands are inclusive on their upper bound: 9.0 ppm is still Safe, 9.01 is
Moderate. The last band is open-ended. An unavailable estimate has no band.
"""

from __future__ import annotations

from dataclasses import dataclass

from comap.config.settings import SeveritySettings


@dataclass(frozen=True)
class Severity:
    name: str
    color: str
    lower: float | None
    upper: float | None

    @property
    def css_class(self) -> str:
        return self.name.lower()


def severity_bands(settings: SeveritySettings | None = None) -> list[Severity]:
    cfg = settings or SeveritySettings()
    out: list[Severity] = []
    lower: float | None = None
    for band in cfg.bands:
        out.append(Severity(name=band.name, color=band.color, lower=lower, upper=band.upper))
        lower = band.upper
    return out


def classify(value: float | None, settings: SeveritySettings | None = None) -> Severity | None:
    """Return the band containing `value`, or None when there is no value."""
    if value is None:
        return None
    bands = severity_bands(settings)
    for band in bands:
        if band.upper is None or value <= band.upper:
            return band
    return bands[-1]


def legend_label(band: Severity) -> str:
    if band.lower is None:
        return f"0-{band.upper:g}: {band.name}"
    if band.upper is None:
        return f"{band.lower:g}+: {band.name}"
    return f"{band.lower:g}-{band.upper:g}: {band.name}"
