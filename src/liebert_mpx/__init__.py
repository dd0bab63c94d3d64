"""liebert_mpx - Liebert MPX PDU web interface client

Reads receptacles, active events and PEM/BRM/receptacle details from a
Liebert MPX power distribution unit by scraping its web interface, and
sends control commands and settings through the same forms the web UI uses.

    from liebert_mpx import MPXClient

    with MPXClient("192.168.23.42", "Liebert", "Liebert") as pdu:
        for event in pdu.get_events():
            print(event)
        pdu.receptacle_identify(1, 1, 1)

Used by pyproject.toml [project.scripts] entry point: liebert-mpx = "liebert_mpx:main"
"""

__version__ = "0.1.0"

from .liebert_mpx import main
from .models import (
    BranchCommand,
    BranchInfo,
    BranchSettings,
    BRMModel,
    Capability,
    Event,
    EventLevel,
    EventType,
    FirmwareVersion,
    InvalidDataError,
    LineSource,
    MissingDataError,
    MPXError,
    PDUCommand,
    PDUInfo,
    PDUSettings,
    PEMModel,
    ReceptacleCommand,
    ReceptacleInfo,
    ReceptacleListEntry,
    ReceptacleSettings,
    ReceptacleType,
    WiringType,
)
from .mpx_client import MPXClient, MPXCommandError, MPXConnectionError

__all__ = [
    "main",
    "MPXClient",
    "MPXError",
    "MPXConnectionError",
    "MPXCommandError",
    "MissingDataError",
    "InvalidDataError",
    "PDUCommand",
    "BranchCommand",
    "ReceptacleCommand",
    "PDUInfo",
    "PDUSettings",
    "BranchInfo",
    "BranchSettings",
    "ReceptacleInfo",
    "ReceptacleSettings",
    "ReceptacleListEntry",
    "Event",
    "EventLevel",
    "EventType",
    "FirmwareVersion",
    "PEMModel",
    "BRMModel",
    "ReceptacleType",
    "LineSource",
    "Capability",
    "WiringType",
]
