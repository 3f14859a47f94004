"""The fixed DroneDeploy annotation palette.

DroneDeploy renders annotations in ten named colors, each with a paired
(lighter) fill color.  Color standardization snaps arbitrary input
colors to the nearest entry of this table.  Iteration order matters:
it decides ties and the default entry (the first one).
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class DroneDeployColor:
    """A single palette entry.

    Attributes:
        name: Display name (e.g. ``"Lime Green"``).
        color: Stroke color as lowercase ``#rrggbb``.
        fill_color: Paired fill color as lowercase ``#rrggbb``.
    """

    name: str
    color: str
    fill_color: str

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "color": self.color, "fillColor": self.fill_color}


DRONEDEPLOY_COLORS: tuple[DroneDeployColor, ...] = (
    DroneDeployColor("Red", "#f34235", "#f67168"),
    DroneDeployColor("Lime Green", "#ccdb38", "#d9e46a"),
    DroneDeployColor("Cyan", "#00bbd3", "#40ccde"),
    DroneDeployColor("Magenta", "#f50057", "#f84081"),
    DroneDeployColor("Orange", "#fe9700", "#feb140"),
    DroneDeployColor("Gold", "#fec006", "#fed044"),
    DroneDeployColor("Green", "#4bae4f", "#78c27b"),
    DroneDeployColor("Teal", "#009587", "#40b0a5"),
    DroneDeployColor("Dark Purple", "#9b26af", "#b45cc3"),
    DroneDeployColor("Amethyst", "#6639b6", "#8c6bc8"),
)

DEFAULT_PALETTE_ENTRY = DRONEDEPLOY_COLORS[0]


def palette_entry(name: str) -> DroneDeployColor:
    """Return the palette entry called *name* (case-insensitive).

    Raises:
        KeyError: If no entry has that name.
    """
    wanted = name.strip().lower()
    for entry in DRONEDEPLOY_COLORS:
        if entry.name.lower() == wanted:
            return entry
    raise KeyError(name)
