"""Category code lookup tables for the KiCad library projection.

Display strings are consumed by KiCad and other tooling as-is; do not reword.
"""

# Categories for parts designed in-house (everything else is a purchased part)
OUR_CATEGORIES = frozenset({
    "PCA", "PCB", "ASY", "DOC", "DFW", "DSW", "DCL", "FIX",
})

# Categories whose parts carry a bill of materials
BOM_CATEGORIES = frozenset({
    "PCA", "ASY",
})

CATEGORY_DISPLAY_NAMES = {
    "CAP": "Capacitors",
    "RES": "Resistors",
    "DIO": "Diodes",
    "LED": "LEDs",
    "SCR": "Screws",
    "MCH": "Mechanical",
    "PCA": "PCB Assemblies",
    "PCB": "Printed Circuit Boards",
    "ASY": "Assemblies",
    "DOC": "Documentation",
    "DFW": "Firmware",
    "DSW": "Software",
    "DCL": "Declarations",
    "FIX": "Fixtures",
    "CNT": "Connectors",
    "IC": "Integrated Circuits",
    "OSC": "Oscillators",
    "XTL": "Crystals",
    "IND": "Inductors",
    "FER": "Ferrites",
    "FUS": "Fuses",
    "SW": "Switches",
    "REL": "Relays",
    "TRF": "Transformers",
    "SNS": "Sensors",
    "DSP": "Displays",
    "SPK": "Speakers",
    "MIC": "Microphones",
    "ANT": "Antennas",
    "CBL": "Cables",
}

CATEGORY_DESCRIPTIONS = {
    "CAP": "Capacitor components",
    "RES": "Resistor components",
    "DIO": "Diode components",
    "LED": "Light emitting diode components",
    "SCR": "Screw and fastener components",
    "MCH": "Mechanical components",
    "PCA": "Printed circuit board assemblies",
    "PCB": "Printed circuit boards",
    "ASY": "Assembly components",
    "DOC": "Documentation components",
    "DFW": "Firmware components",
    "DSW": "Software components",
    "DCL": "Declaration components",
    "FIX": "Fixture components",
    "CNT": "Connector components",
    "IC": "Integrated circuit components",
    "OSC": "Oscillator components",
    "XTL": "Crystal components",
    "IND": "Inductor components",
    "FER": "Ferrite components",
    "FUS": "Fuse components",
    "SW": "Switch components",
    "REL": "Relay components",
    "TRF": "Transformer components",
    "SNS": "Sensor components",
    "DSP": "Display components",
    "SPK": "Speaker components",
    "MIC": "Microphone components",
    "ANT": "Antenna components",
    "CBL": "Cable components",
}

# KiCad symbol library references per category
CATEGORY_SYMBOLS = {
    "CAP": "Device:C",
    "RES": "Device:R",
    "DIO": "Device:D",
    "LED": "Device:LED",
    "IC": "Device:IC",
    "OSC": "Device:Oscillator",
    "XTL": "Device:Crystal",
    "IND": "Device:L",
    "FER": "Device:Ferrite_Bead",
    "FUS": "Device:Fuse",
    "SW": "Switch:SW_Push",
    "REL": "Relay:Relay_SPDT",
    "TRF": "Device:Transformer",
    "SNS": "Sensor:Sensor",
    "CNT": "Connector:Conn_01x02",
    "ANT": "Device:Antenna",
    "ANA": "Device:IC",  # Analog IC
    "SCR": "Mechanical:MountingHole",
    "MCH": "Mechanical:MountingHole",
}

DEFAULT_SYMBOL = "Device:Device"
