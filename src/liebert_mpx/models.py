"""Typed records for Liebert MPX PDU data"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict


class MPXError(Exception):
    """Base exception for all Liebert MPX client errors"""

    pass


class MissingDataError(MPXError):
    """PDU did not provide required information"""

    def __init__(self, key: str = ""):
        self.key = key
        message = "could not find required data"
        if key:
            message = f"{message}: {key}"
        super().__init__(message)


class InvalidDataError(MPXError):
    """PDU provided malformed data"""

    pass


class VendorEnum(Enum):
    """Enum whose values are the exact strings shown by the PDU web interface"""

    @classmethod
    def from_str(cls, text: str):
        """Look up a member by its vendor string"""
        for member in cls:
            if member.value == text:
                return member
        raise InvalidDataError(f"unknown {cls.__name__}: {text!r}")


class WiringType(VendorEnum):
    """Wiring type (1-Phase or 3-Phase)"""

    ONE_PHASE = "1-Phase / 3-Wire (L, N, PE)"
    THREE_PHASE = "3-Phase / 5-Wire (L1, L2, L3, N, PE)"

    def __str__(self) -> str:
        return "1-Phase" if self is WiringType.ONE_PHASE else "3-Phase"


class ReceptacleType(VendorEnum):
    """Receptacle connector type"""

    C13 = "IEC 60320 Sheet F C13"
    C19 = "C19"
    SCHUKO = "Schuko"

    def __str__(self) -> str:
        return "Schuko" if self is ReceptacleType.SCHUKO else self.name


class PEMModel(VendorEnum):
    """Liebert MPX PEM (power entry module) model"""

    EHAEXQ30 = "MPXPEM-EHAEXQ30"  # 1 phase 32A elementary
    EHAXXQ30 = "MPXPEM-EHAXXQ30"  # 1 phase 32A monitored
    EHAEXT30 = "MPXPEM-EHAEXT30"  # 3 phase 16A elementary
    EHAXXT30 = "MPXPEM-EHAXXT30"  # 3 phase 16A monitored
    EHAEXR30 = "MPXPEM-EHAEXR30"  # 3 phase 32A elementary
    EHAXXR30 = "MPXPEM-EHAXXR30"  # 3 phase 32A monitored
    EHBEXZ30 = "MPXPEM-EHBEXZ30"  # 3 phase 63A elementary
    EHBXXZ30 = "MPXPEM-EHBXXZ30"  # 3 phase 63A monitored


class BRMModel(VendorEnum):
    """Liebert MPX BRM (branch module) model"""

    # elementary
    EEBC7N1N = "MPXBRM-EEBC7N1N"
    EEBC7N2N = "MPXBRM-EEBC7N2N"
    EEBC7N3N = "MPXBRM-EEBC7N3N"
    EEBC4O1N = "MPXBRM-EEBC4O1N"
    EEBC4O2N = "MPXBRM-EEBC4O2N"
    EEBC4O3N = "MPXBRM-EEBC4O3N"
    EEBC3P1N = "MPXBRM-EEBC3P1N"
    EEBC3P2N = "MPXBRM-EEBC3P2N"
    EEBC3P3N = "MPXBRM-EEBC3P3N"
    # branch-monitored
    EBBC6N1N = "MPXBRM-EBBC6N1N"
    EBBC6N2N = "MPXBRM-EBBC6N2N"
    EBBC6N3N = "MPXBRM-EBBC6N3N"
    EBBC4O1N = "MPXBRM-EBBC4O1N"
    EBBC4O2N = "MPXBRM-EBBC4O2N"
    EBBC4O3N = "MPXBRM-EBBC4O3N"
    EBBC3P1N = "MPXBRM-EBBC3P1N"
    EBBC3P2N = "MPXBRM-EBBC3P2N"
    EBBC3P3N = "MPXBRM-EBBC3P3N"
    # receptacle-managed
    ERBC6N1N = "MPXBRM-ERBC6N1N"
    ERBC6N2N = "MPXBRM-ERBC6N2N"
    ERBC6N3N = "MPXBRM-ERBC6N3N"
    ERBC4O1N = "MPXBRM-ERBC4O1N"
    ERBC4O2N = "MPXBRM-ERBC4O2N"
    ERBC4O3N = "MPXBRM-ERBC4O3N"
    ERBC3P1N = "MPXBRM-ERBC3P1N"
    ERBC3P2N = "MPXBRM-ERBC3P2N"
    ERBC3P3N = "MPXBRM-ERBC3P3N"


class EventType(VendorEnum):
    """Alarm or warning type as named on the active alarms page"""

    RECEPTACLE_OVER_CURRENT = "Receptacle Over Current"
    RECEPTACLE_LOW_CURRENT = "Receptacle Low Current"
    BRANCH_LOW_VOLTAGE = "Branch Low Voltage (LN)"
    BRANCH_OVER_CURRENT = "Branch Over Current"
    BRANCH_LOW_CURRENT = "Branch Low Current"
    BRANCH_FAILURE = "Branch Failure"
    BRANCH_BREAKER_OPEN = "Branch Breaker Open"
    PDU_LOW_VOLTAGE_L1 = "PDU Low Voltage L1-N"
    PDU_LOW_VOLTAGE_L2 = "PDU Low Voltage L2-N"
    PDU_LOW_VOLTAGE_L3 = "PDU Low Voltage L3-N"
    PDU_OVER_CURRENT_L1 = "PDU Over Current L1"
    PDU_OVER_CURRENT_L2 = "PDU Over Current L2"
    PDU_OVER_CURRENT_L3 = "PDU Over Current L3"
    PDU_LOW_CURRENT_L1 = "PDU Low Current L1"
    PDU_LOW_CURRENT_L2 = "PDU Low Current L2"
    PDU_LOW_CURRENT_L3 = "PDU Low Current L3"
    PDU_FAILURE = "PDU Failure"
    PDU_COMMUNICATION_FAIL = "PDU Communication Fail"
    PDU_OVER_CURRENT_N = "PDU Neutral Over Current"


class EventLevel(VendorEnum):
    """Event level, encoded by the PDU as a status icon"""

    OK = "accept.png"
    INFO = "information.png"
    WARNING = "warn.png"
    ALARM = "err.png"

    @classmethod
    def from_icon(cls, src: str) -> "EventLevel":
        """Map an icon path such as ``../../../images/warn.png`` to a level"""
        return cls.from_str(src.strip().rsplit("/", 1)[-1])


class LineSource(VendorEnum):
    """Line source (e.g. L1-N)"""

    L1_N = "Type L1-N"
    L2_N = "Type L2-N"
    L3_N = "Type L3-N"

    def __str__(self) -> str:
        return self.value[len("Type ") :]


class Capability(VendorEnum):
    """Hardware capabilities (measurement / control)"""

    MEASURE_AND_CONTROL = "All Measurements/Control"

    def __str__(self) -> str:
        return "Measure & Control"


@dataclass(frozen=True)
class FirmwareVersion:
    """Firmware version, shown by the PDU as ``a-b-c-d``"""

    p0: int
    p1: int
    p2: int
    p3: int

    @classmethod
    def from_str(cls, text: str) -> "FirmwareVersion":
        parts = text.strip().split("-")
        if len(parts) != 4:
            raise MissingDataError(f"firmware version {text!r}")

        values = []
        for part in parts:
            if not (part.isascii() and part.isdigit()):
                raise InvalidDataError(f"invalid firmware version: {text!r}")
            value = int(part)
            if value > 255:
                raise InvalidDataError(f"invalid firmware version: {text!r}")
            values.append(value)

        return cls(*values)

    def __str__(self) -> str:
        return f"{self.p0}.{self.p1}.{self.p2}.{self.p3}"


class PDUCommand(Enum):
    """Command that can be sent to the main (PEM) module"""

    TEST_EVENT = "test-event"
    RESET_ENERGY = "reset-energy"


class BranchCommand(Enum):
    """Command that can be sent to a branch module"""

    RESET_ENERGY = "reset-energy"


class ReceptacleCommand(Enum):
    """Command that can be sent to a receptacle"""

    DISABLE = "disable"
    ENABLE = "enable"
    REBOOT = "reboot"
    IDENTIFY = "identify"
    RESET_ENERGY = "reset-energy"


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.name
    if isinstance(value, FirmwareVersion):
        return str(value)
    if isinstance(value, Record):
        return value.as_dict()
    return value


class Record:
    """Mixin for dataclass records that can be dumped as plain dicts"""

    def as_dict(self) -> Dict[str, Any]:
        return {
            field.name: _plain(getattr(self, field.name))
            for field in dataclasses.fields(self)  # type: ignore[arg-type]
        }


@dataclass
class ReceptacleListEntry(Record):
    """Condensed receptacle information from the receptacle list"""

    pdu: int
    branch: int
    receptacle: int
    enabled: bool
    locked: bool
    status: EventLevel
    label: str


@dataclass
class Event(Record):
    """PDU event (e.g. a warning or an alarm)"""

    level: EventLevel
    pdu: int
    branch: int
    receptacle: int
    event: EventType


@dataclass
class PDUStatus(Record):
    """Measurements from a PEM module"""

    accumulated_energy: float  # kWh
    input_power: float  # W
    voltage_l1_n: float  # V AC
    voltage_l2_n: float
    voltage_l3_n: float
    current_l1: float  # A AC
    current_l2: float
    current_l3: float
    current_n: float
    current_available_to_alarm_l1: float
    current_available_to_alarm_l2: float
    current_available_to_alarm_l3: float
    current_utilization_l1: float  # %
    current_utilization_l2: float
    current_utilization_l3: float
    line_frequency: float  # Hz


@dataclass
class PDUEvents(Record):
    low_voltage_l1: EventLevel
    low_voltage_l2: EventLevel
    low_voltage_l3: EventLevel
    over_current_l1: EventLevel
    over_current_l2: EventLevel
    over_current_l3: EventLevel
    low_current_l1: EventLevel
    low_current_l2: EventLevel
    low_current_l3: EventLevel
    failure: EventLevel
    communication_fail: EventLevel
    over_current_n: EventLevel


@dataclass
class PDUSettings(Record):
    """Settings of a PEM module, thresholds in percent"""

    label: str
    asset_tag_1: str
    asset_tag_2: str
    n_over_current_alarm_threshold: int
    n_over_current_warning_threshold: int
    l1_low_current_alarm_threshold: int
    l1_over_current_alarm_threshold: int
    l1_over_current_warning_threshold: int
    l2_low_current_alarm_threshold: int
    l2_over_current_alarm_threshold: int
    l2_over_current_warning_threshold: int
    l3_low_current_alarm_threshold: int
    l3_over_current_alarm_threshold: int
    l3_over_current_warning_threshold: int


@dataclass
class PDUHardware(Record):
    pem_model: PEMModel
    fw_version: FirmwareVersion
    serial_number: str
    wiring_type: WiringType
    rated_input_voltage: int  # V AC
    rated_input_current: int  # A AC
    rated_input_line_frequency: int  # Hz


@dataclass
class PDUInfo(Record):
    """Information about a PDU input module"""

    status: PDUStatus
    events: PDUEvents
    settings: PDUSettings
    hardware: PDUHardware


@dataclass
class BranchStatus(Record):
    accumulated_energy: float  # kWh
    voltage: float  # V AC
    current: float  # A AC
    current_available_to_alarm: float  # A AC
    current_utilization: float  # %
    power: float  # W
    apparent_power: float  # VA
    power_factor: float


@dataclass
class BranchEvents(Record):
    low_voltage: EventLevel
    over_current: EventLevel
    low_current: EventLevel
    failure: EventLevel
    breaker_open: EventLevel


@dataclass
class BranchSettings(Record):
    label: str
    asset_tag_1: str
    asset_tag_2: str
    over_current_alarm_threshold: int
    over_current_warning_threshold: int
    low_current_alarm_threshold: int


@dataclass
class BranchHardware(Record):
    brm_model: BRMModel
    fw_version: FirmwareVersion
    serial_number: str
    receptacle_type: ReceptacleType
    capabilities: Capability
    line_source: LineSource
    rated_line_voltage: int
    rated_line_current: int
    rated_line_frequency: int


@dataclass
class BranchInfo(Record):
    """Information about a branch module"""

    status: BranchStatus
    events: BranchEvents
    settings: BranchSettings
    hardware: BranchHardware


@dataclass
class ReceptacleStatus(Record):
    accumulated_energy: float  # kWh
    voltage: float  # V AC
    current: float  # A AC
    current_available_to_alarm: float  # A AC
    current_utilization: float  # %
    power: float  # W
    apparent_power: float  # VA
    power_factor: float
    current_crest_factor: float


@dataclass
class ReceptacleEvents(Record):
    over_current: EventLevel
    low_current: EventLevel


@dataclass
class ReceptacleSettings(Record):
    """Receptacle settings

    ``power_state`` is the current state, ``power_control`` the requested one.
    Writing settings does not switch the receptacle, use a
    :class:`ReceptacleCommand` for that.
    """

    label: str
    asset_tag_1: str
    asset_tag_2: str
    over_current_alarm_threshold: int
    over_current_warning_threshold: int
    low_current_alarm_threshold: int
    power_state: bool
    power_control: bool
    control_lock_state: bool
    power_on_delay: int  # seconds


@dataclass
class ReceptacleHardware(Record):
    receptacle_type: ReceptacleType
    line_source: LineSource
    capabilities: Capability


@dataclass
class ReceptacleInfo(Record):
    """Information about a receptacle"""

    status: ReceptacleStatus
    events: ReceptacleEvents
    settings: ReceptacleSettings
    hardware: ReceptacleHardware
