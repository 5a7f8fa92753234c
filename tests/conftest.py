"""Shared partmaster fixtures."""

import pytest

from partmaster_mcp.kicad import KiCadLibrary
from partmaster_mcp.partmaster import Partmaster

CAP_CSV = """\
IPN,Description,Footprint,Value,Manufacturer,MPN,Priority
CAP-001-1001,superduper cap,,,CapsInc,10045,2
CAP-001-1001,,C_0603,10k,MaxCaps,abc2322,1
CAP-002-0004,100nF 16V X7R,C_0402,100nF,Murata,GRM155R71C104KA88D,
"""

# Short rows and a row without IPN
RES_CSV = """\
IPN,Description,Value
RES-001-0001,10k 1% 0603,10k
,unnumbered resistor,1k
"""

# Mixed categories, plus malformed IPNs
PARTS_CSV = """\
IPN,Description,Manufacturer,MPN
PCA-001-0001,Main board assembly,Acme,
DIO-001-0001,Schottky diode,Diodes Inc,BAT54
FUS-001-9999,Fuse 1A,Littelfuse,0451001
XYZ-001-00A1,Bad revision,,
ZZZ-001
"""


@pytest.fixture
def pm_dir(tmp_path):
    """Directory with three partmaster files."""
    (tmp_path / "cap.csv").write_text(CAP_CSV)
    (tmp_path / "res.csv").write_text(RES_CSV)
    (tmp_path / "parts.csv").write_text(PARTS_CSV)
    (tmp_path / "notes.txt").write_text("not a partmaster file\n")
    return tmp_path


@pytest.fixture
def partmaster(pm_dir):
    return Partmaster.load(pm_dir)


@pytest.fixture
def library(partmaster):
    return KiCadLibrary(partmaster)
