"""HTML parsing for the Liebert MPX web interface

The PDU renders every page as plain HTML tables. Pages are parsed in two
steps: markup is reduced to raw tables (key -> value and unit), then raw
tables are turned into the typed records from :mod:`liebert_mpx.models`.
"""

import logging
from typing import Dict, List, NamedTuple, Optional, Tuple

from bs4 import BeautifulSoup, Tag

from .models import (
    BranchEvents,
    BranchHardware,
    BranchInfo,
    BranchSettings,
    BranchStatus,
    BRMModel,
    Capability,
    Event,
    EventLevel,
    EventType,
    FirmwareVersion,
    InvalidDataError,
    LineSource,
    MissingDataError,
    PDUEvents,
    PDUHardware,
    PDUInfo,
    PDUSettings,
    PDUStatus,
    PEMModel,
    ReceptacleEvents,
    ReceptacleHardware,
    ReceptacleInfo,
    ReceptacleListEntry,
    ReceptacleSettings,
    ReceptacleStatus,
    ReceptacleType,
    WiringType,
)

logger = logging.getLogger(__name__)

NO_ALARMS = "No Alarms Present"

STATUS_AREA = "RpcStatusArea"
ALARM_AREA = "RpcAlarmArea"
SETTING_AREA = "RpcSettingArea"
INFO_AREA = "RpcInfoArea"
DETAIL_AREA = "DetailPanelArea"


class TableValue(NamedTuple):
    """A table value with its unit, e.g. ("23.42", "kWH")"""

    value: str
    unit: str

    def _check_unit(self, unit: str) -> None:
        if self.unit != unit:
            raise InvalidDataError(f"expected unit {unit!r}, got {self.unit!r}")

    def get_float(self, unit: str) -> float:
        self._check_unit(unit)
        try:
            return float(self.value)
        except ValueError:
            raise InvalidDataError(f"not a number: {self.value!r}")

    def get_int(self, unit: str) -> int:
        self._check_unit(unit)
        return _to_int(self.value)


RawDataTable = Dict[str, TableValue]


class InfoTables(NamedTuple):
    """The four tables shown on every PDU, branch and receptacle page"""

    status: RawDataTable
    events: RawDataTable
    settings: RawDataTable
    hardware: RawDataTable


def _soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def _clean(text: str) -> str:
    return text.replace("\xa0", " ").strip()


def _text(cell: Tag) -> str:
    return _clean(cell.get_text())


def _cells(row: Tag) -> List[Tag]:
    return row.find_all(["td", "th"], recursive=False)


def _img_src(cell: Tag) -> str:
    img = cell.find("img")
    if img is None or not img.get("src"):
        raise InvalidDataError("missing status icon")
    return img["src"]


def _span_title(cell: Tag) -> Optional[str]:
    span = cell.find("span")
    if span is None:
        return None
    return span.get("title")


def _to_int(text: str) -> int:
    # counters and thresholds are unsigned on the device
    if not (text.isascii() and text.isdigit()):
        raise InvalidDataError(f"not an unsigned integer: {text!r}")
    return int(text)


def _area_table(soup: BeautifulSoup, area_id: str) -> Tag:
    area = soup.find("div", id=area_id)
    if area is None:
        raise InvalidDataError(f"missing area {area_id}")
    table = area.find("table")
    if table is None:
        raise InvalidDataError(f"missing table in {area_id}")
    return table


# Receptacle list


def _parse_receptacle_row(row: Tag) -> ReceptacleListEntry:
    address = row["id"].split("-")
    if len(address) != 3:
        raise InvalidDataError(f"invalid receptacle id: {row['id']!r}")
    pdu, branch, receptacle = (_to_int(part) for part in address)

    cells = _cells(row)
    if len(cells) < 5:
        raise InvalidDataError(f"receptacle row {row['id']} is incomplete")

    state = _span_title(cells[2])
    if state not in ("On", "Off"):
        raise InvalidDataError(f"invalid receptacle state: {state!r}")

    lock = _span_title(cells[3])
    if lock not in ("Locked", "Unlocked"):
        raise InvalidDataError(f"invalid receptacle lock state: {lock!r}")

    return ReceptacleListEntry(
        pdu=pdu,
        branch=branch,
        receptacle=receptacle,
        enabled=state == "On",
        locked=lock == "Locked",
        status=EventLevel.from_icon(_img_src(cells[4])),
        label=_text(cells[0]),
    )


def parse_receptacles(html: str) -> List[ReceptacleListEntry]:
    """Parse the receptacle list (rpcReceptacleListData.htm)"""
    table = _soup(html).find("table", id="rcpTable")
    if table is None:
        raise InvalidDataError("missing receptacle table")

    entries = [_parse_receptacle_row(row) for row in table.find_all("tr") if row.get("id")]
    logger.debug("Parsed %d receptacles", len(entries))
    return entries


# Active alarms


def _parse_event_row(row: Tag) -> Optional[Event]:
    cells = _cells(row)
    if not cells:
        raise InvalidDataError("empty event row")

    if cells[0].name == "th" or _text(cells[0]) == NO_ALARMS:
        return None

    level = EventLevel.from_icon(_img_src(cells[0]))
    if len(cells) < 3:
        raise InvalidDataError("event row is incomplete")

    # the address has as many parts as the event scope (pdu, branch, receptacle)
    address_text = _text(cells[1])
    address = address_text.split("-") if address_text else []
    pdu, branch, receptacle = (
        _to_int(address[i]) if i < len(address) else 0 for i in range(3)
    )

    return Event(
        level=level,
        pdu=pdu,
        branch=branch,
        receptacle=receptacle,
        event=EventType.from_str(_text(cells[2])),
    )


def parse_events(html: str) -> List[Event]:
    """Parse the active alarms page (rpcActiveAlarms.htm)"""
    table = _area_table(_soup(html), DETAIL_AREA)

    events = []
    for row in table.find_all("tr"):
        event = _parse_event_row(row)
        if event is not None:
            events.append(event)
    logger.debug("Parsed %d active events", len(events))
    return events


# Info pages


def parse_table(table: Tag, alarm: bool = False) -> RawDataTable:
    """Reduce an info table to key -> TableValue

    Plain tables have ``key | value | unit`` rows, the alarm table has
    ``icon | key`` rows where the icon path becomes the value.
    """
    result = {}
    for row in table.find_all("tr"):
        cells = _cells(row)
        if not cells or any(cell.name == "th" for cell in cells):
            continue

        if alarm:
            if len(cells) < 2:
                raise InvalidDataError("alarm row is incomplete")
            result[_text(cells[1])] = TableValue(_img_src(cells[0]), "")
        else:
            if len(cells) < 3:
                raise InvalidDataError("table row is incomplete")
            result[_text(cells[0])] = TableValue(_text(cells[1]), _text(cells[2]))

    return result


def get_info_tables(html: str) -> InfoTables:
    soup = _soup(html)
    return InfoTables(
        status=parse_table(_area_table(soup, STATUS_AREA)),
        events=parse_table(_area_table(soup, ALARM_AREA), alarm=True),
        settings=parse_table(_area_table(soup, SETTING_AREA)),
        hardware=parse_table(_area_table(soup, INFO_AREA)),
    )


def _get(table: RawDataTable, key: str) -> TableValue:
    try:
        return table[key]
    except KeyError:
        raise MissingDataError(key)


def _floats(table: RawDataTable, fields: Dict[str, Tuple[str, str]]) -> Dict[str, float]:
    return {name: _get(table, key).get_float(unit) for name, (key, unit) in fields.items()}


def _ints(table: RawDataTable, fields: Dict[str, Tuple[str, str]]) -> Dict[str, int]:
    return {name: _get(table, key).get_int(unit) for name, (key, unit) in fields.items()}


def _levels(table: RawDataTable, fields: Dict[str, str]) -> Dict[str, EventLevel]:
    return {name: EventLevel.from_icon(_get(table, key).value) for name, key in fields.items()}


def _labels(table: RawDataTable, prefix: str) -> Dict[str, str]:
    return {
        "label": _get(table, f"{prefix} User Assigned Label").value,
        "asset_tag_1": _get(table, f"{prefix} Asset Tag 01").value,
        "asset_tag_2": _get(table, f"{prefix} Asset Tag 02").value,
    }


PDU_STATUS_FIELDS = {
    "accumulated_energy": ("PDU Accumulated Energy", "kWH"),
    "input_power": ("PDU Total Input Power", "W"),
    "voltage_l1_n": ("PDU Voltage L1-N", "VAC"),
    "voltage_l2_n": ("PDU Voltage L2-N", "VAC"),
    "voltage_l3_n": ("PDU Voltage L3-N", "VAC"),
    "current_l1": ("PDU Current L1", "A AC"),
    "current_l2": ("PDU Current L2", "A AC"),
    "current_l3": ("PDU Current L3", "A AC"),
    "current_n": ("PDU Neutral Current Measurement", "A AC"),
    "current_available_to_alarm_l1": ("PDU Available L1 Current Until Alarm", "A AC"),
    "current_available_to_alarm_l2": ("PDU Available L2 Current Until Alarm", "A AC"),
    "current_available_to_alarm_l3": ("PDU Available L3 Current Until Alarm", "A AC"),
    "current_utilization_l1": ("PDU Percent L1 Current Utilization", "%"),
    "current_utilization_l2": ("PDU Percent L2 Current Utilization", "%"),
    "current_utilization_l3": ("PDU Percent L3 Current Utilization", "%"),
    "line_frequency": ("PEM Line Frequency", "Hz"),
}

PDU_EVENT_FIELDS = {
    "low_voltage_l1": "PDU Low Voltage L1-N",
    "low_voltage_l2": "PDU Low Voltage L2-N",
    "low_voltage_l3": "PDU Low Voltage L3-N",
    "over_current_l1": "PDU Over Current L1",
    "over_current_l2": "PDU Over Current L2",
    "over_current_l3": "PDU Over Current L3",
    "low_current_l1": "PDU Low Current L1",
    "low_current_l2": "PDU Low Current L2",
    "low_current_l3": "PDU Low Current L3",
    "failure": "PDU Failure",
    "communication_fail": "PDU Communication Fail",
    "over_current_n": "PDU Neutral Over Current",
}

PDU_THRESHOLD_FIELDS = {
    "n_over_current_alarm_threshold": ("Neutral Over Current Alarm Threshold", "%"),
    "n_over_current_warning_threshold": ("Neutral Over Current Warning Threshold", "%"),
    "l1_over_current_warning_threshold": ("Over Current Warn Threshold L1", "%"),
    "l2_over_current_warning_threshold": ("Over Current Warn Threshold L2", "%"),
    "l3_over_current_warning_threshold": ("Over Current Warn Threshold L3", "%"),
    "l1_over_current_alarm_threshold": ("Over Current Alarm Threshold L1", "%"),
    "l2_over_current_alarm_threshold": ("Over Current Alarm Threshold L2", "%"),
    "l3_over_current_alarm_threshold": ("Over Current Alarm Threshold L3", "%"),
    "l1_low_current_alarm_threshold": ("Low Current Alarm Threshold L1", "%"),
    "l2_low_current_alarm_threshold": ("Low Current Alarm Threshold L2", "%"),
    "l3_low_current_alarm_threshold": ("Low Current Alarm Threshold L3", "%"),
}

PDU_RATING_FIELDS = {
    "rated_input_voltage": ("Rated Input Line Voltage", "VAC"),
    "rated_input_current": ("Rated Input Line Current", "A AC"),
    "rated_input_line_frequency": ("Rated Input Line Frequency", "Hz"),
}

# branch and receptacle pages share these threshold keys
THRESHOLD_FIELDS = {
    "over_current_alarm_threshold": ("Over Current Alarm Threshold", "%"),
    "over_current_warning_threshold": ("Over Current Warning Threshold", "%"),
    "low_current_alarm_threshold": ("Low Current Alarm Threshold", "%"),
}

BRANCH_STATUS_FIELDS = {
    "accumulated_energy": ("Branch Accumulated Energy", "kWH"),
    "voltage": ("Branch Voltage", "VAC"),
    "current": ("Branch Current", "A AC"),
    "current_available_to_alarm": ("Branch Available Current Until Alarm", "A AC"),
    "current_utilization": ("Branch Percent Current Utilization", "%"),
    "power": ("Branch Power", "W"),
    "apparent_power": ("Branch Apparent Power", "VA"),
    "power_factor": ("Branch Power Factor", ""),
}

BRANCH_EVENT_FIELDS = {
    "low_voltage": "Branch Low Voltage (LN)",
    "over_current": "Branch Over Current",
    "low_current": "Branch Low Current",
    "failure": "Branch Failure",
    "breaker_open": "Branch Breaker Open",
}

BRANCH_RATING_FIELDS = {
    "rated_line_voltage": ("Branch Rated Line Voltage", "VAC"),
    "rated_line_current": ("Branch Rated Line Current", "A AC"),
    "rated_line_frequency": ("Branch Rated Line Frequency", "Hz"),
}

RECEPTACLE_STATUS_FIELDS = {
    "accumulated_energy": ("Receptacle Accumulated Energy", "kWH"),
    "voltage": ("Receptacle Voltage", "VAC"),
    "current": ("Receptacle Current", "A AC"),
    "current_available_to_alarm": ("Receptacle Available Current Until Alarm", "A AC"),
    "current_utilization": ("Receptacle Percent Current Utilization", "%"),
    "power": ("Receptacle Power", "W"),
    "apparent_power": ("Receptacle Apparent Power", "VA"),
    "power_factor": ("Receptacle Power Factor", ""),
    "current_crest_factor": ("Receptacle Current Crest Factor", ""),
}

RECEPTACLE_EVENT_FIELDS = {
    "over_current": "Receptacle Over Current",
    "low_current": "Receptacle Low Current",
}


def pdu_info_from_tables(tables: InfoTables) -> PDUInfo:
    hardware = tables.hardware
    return PDUInfo(
        status=PDUStatus(**_floats(tables.status, PDU_STATUS_FIELDS)),
        events=PDUEvents(**_levels(tables.events, PDU_EVENT_FIELDS)),
        settings=PDUSettings(
            **_labels(tables.settings, "PDU"),
            **_ints(tables.settings, PDU_THRESHOLD_FIELDS),
        ),
        hardware=PDUHardware(
            pem_model=PEMModel.from_str(_get(hardware, "PEM Model").value),
            fw_version=FirmwareVersion.from_str(_get(hardware, "Firmware Version").value),
            serial_number=_get(hardware, "PEM Serial Number").value,
            wiring_type=WiringType.from_str(_get(hardware, "The PDU input wiring type").value),
            **_ints(hardware, PDU_RATING_FIELDS),
        ),
    )


def branch_info_from_tables(tables: InfoTables) -> BranchInfo:
    hardware = tables.hardware
    return BranchInfo(
        status=BranchStatus(**_floats(tables.status, BRANCH_STATUS_FIELDS)),
        events=BranchEvents(**_levels(tables.events, BRANCH_EVENT_FIELDS)),
        settings=BranchSettings(
            **_labels(tables.settings, "Branch"),
            **_ints(tables.settings, THRESHOLD_FIELDS),
        ),
        hardware=BranchHardware(
            brm_model=BRMModel.from_str(_get(hardware, "BRM Model").value),
            fw_version=FirmwareVersion.from_str(_get(hardware, "Firmware Version").value),
            serial_number=_get(hardware, "Branch Serial Number").value,
            receptacle_type=ReceptacleType.from_str(_get(hardware, "Branch Receptacle Type").value),
            capabilities=Capability.from_str(_get(hardware, "Branch Capabilities").value),
            line_source=LineSource.from_str(_get(hardware, "Branch Line Source").value),
            **_ints(hardware, BRANCH_RATING_FIELDS),
        ),
    )


def receptacle_info_from_tables(tables: InfoTables) -> ReceptacleInfo:
    settings = tables.settings
    hardware = tables.hardware
    return ReceptacleInfo(
        status=ReceptacleStatus(**_floats(tables.status, RECEPTACLE_STATUS_FIELDS)),
        events=ReceptacleEvents(**_levels(tables.events, RECEPTACLE_EVENT_FIELDS)),
        settings=ReceptacleSettings(
            **_labels(settings, "Receptacle"),
            **_ints(settings, THRESHOLD_FIELDS),
            power_state=_get(settings, "Receptacle Power State").value == "On",
            power_control=_get(settings, "Receptacle Power Control").value == "On",
            control_lock_state=_get(settings, "Receptacle Control Lock State").value == "Locked",
            power_on_delay=_get(settings, "Receptacle Power On Delay").get_int("sec"),
        ),
        hardware=ReceptacleHardware(
            receptacle_type=ReceptacleType.from_str(_get(hardware, "Receptacle Type").value),
            line_source=LineSource.from_str(_get(hardware, "Receptacle Line Source").value),
            capabilities=Capability.from_str(_get(hardware, "Receptacle Capabilities").value),
        ),
    )


def parse_pdu_info(html: str) -> PDUInfo:
    """Parse a PDU (PEM) page (rpcAps.htm)"""
    return pdu_info_from_tables(get_info_tables(html))


def parse_branch_info(html: str) -> BranchInfo:
    """Parse a branch module page (rpcRem.htm)"""
    return branch_info_from_tables(get_info_tables(html))


def parse_receptacle_info(html: str) -> ReceptacleInfo:
    """Parse a receptacle page (rpcReceptacle.htm)"""
    return receptacle_info_from_tables(get_info_tables(html))
