"""Liebert MPX web interface client"""

import dataclasses
import logging
import os
from typing import Any, List, Optional, Sequence, Tuple

import requests

from . import parser
from .models import (
    BranchCommand,
    BranchInfo,
    BranchSettings,
    Event,
    MPXError,
    PDUCommand,
    PDUInfo,
    PDUSettings,
    ReceptacleCommand,
    ReceptacleInfo,
    ReceptacleListEntry,
    ReceptacleSettings,
)

logger = logging.getLogger(__name__)

FormData = Sequence[Tuple[str, str]]

# a settings post is answered with a redirect back to the settings page
ACCEPTED_STATUS_CODES = (200, 303)

PDU_COMMAND_FORMS = {
    PDUCommand.TEST_EVENT: [("testEvent", "Send")],
    PDUCommand.RESET_ENERGY: [("energyControl", "Reset")],
}

BRANCH_COMMAND_FORMS = {
    BranchCommand.RESET_ENERGY: [("energyControl", "Reset")],
}

RECEPTACLE_COMMAND_FORMS = {
    ReceptacleCommand.DISABLE: [("receptacleStateGroup", "0"), ("Submit", "Save")],
    ReceptacleCommand.ENABLE: [("receptacleStateGroup", "1"), ("Submit", "Save")],
    ReceptacleCommand.REBOOT: [("receptacleStateGroup", "2"), ("Submit", "Save")],
    ReceptacleCommand.IDENTIFY: [("rcpIdentControl", "Submit")],
    ReceptacleCommand.RESET_ENERGY: [("energyControl", "Reset")],
}


class MPXConnectionError(MPXError):
    """Custom exception for PDU connection errors"""

    pass


class MPXCommandError(MPXError):
    """Custom exception for writes rejected by the PDU"""

    def __init__(self, url: str, status_code: int):
        self.url = url
        self.status_code = status_code
        super().__init__(f"PDU rejected request to {url}: HTTP {status_code}")


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").lower() in ["true", "1"]


def _env_timeout() -> float:
    value = os.getenv("MPX_TIMEOUT", "10")
    try:
        timeout = float(value)
    except ValueError:
        raise MPXError(f"MPX_TIMEOUT is not a number: {value!r}")
    if timeout <= 0:
        raise MPXError(f"MPX_TIMEOUT must be positive: {value!r}")
    return timeout


def pdu_settings_form(settings: PDUSettings) -> List[Tuple[str, str]]:
    """Form fields for rpcControlApsSetting"""
    return [
        ("Submit", "Save"),
        ("label", settings.label),
        ("assetTag1", settings.asset_tag_1),
        ("assetTag2", settings.asset_tag_2),
        ("ecNeutralThrshldOverAlarm", str(settings.n_over_current_alarm_threshold)),
        ("ecNeutralThrshldOverWarn", str(settings.n_over_current_warning_threshold)),
        ("ecThresholdHiAlmL1", str(settings.l1_over_current_alarm_threshold)),
        ("ecThresholdHiAlmL2", str(settings.l2_over_current_alarm_threshold)),
        ("ecThresholdHiAlmL3", str(settings.l3_over_current_alarm_threshold)),
        ("ecThresholdHiWrnL1", str(settings.l1_over_current_warning_threshold)),
        ("ecThresholdHiWrnL2", str(settings.l2_over_current_warning_threshold)),
        ("ecThresholdHiWrnL3", str(settings.l3_over_current_warning_threshold)),
        ("ecThresholdLoAlmL1", str(settings.l1_low_current_alarm_threshold)),
        ("ecThresholdLoAlmL2", str(settings.l2_low_current_alarm_threshold)),
        ("ecThresholdLoAlmL3", str(settings.l3_low_current_alarm_threshold)),
    ]


def branch_settings_form(settings: BranchSettings) -> List[Tuple[str, str]]:
    """Form fields for rpcControlRemSetting"""
    return [
        ("Submit", "Save"),
        ("label", settings.label),
        ("assetTag1", settings.asset_tag_1),
        ("assetTag2", settings.asset_tag_2),
        ("ecThresholdHiAlmLN", str(settings.over_current_alarm_threshold)),
        ("ecThresholdHiWrnLN", str(settings.over_current_warning_threshold)),
        ("ecThresholdLoAlmLN", str(settings.low_current_alarm_threshold)),
    ]


def receptacle_settings_form(settings: ReceptacleSettings) -> List[Tuple[str, str]]:
    """Form fields for rpcControlReceptacleSetting"""
    return [
        ("Submit", "Save"),
        ("label", settings.label),
        ("assetTag1", settings.asset_tag_1),
        ("assetTag2", settings.asset_tag_2),
        ("ecThresholdHiAlmL1", str(settings.over_current_alarm_threshold)),
        ("ecThresholdHiWrnL1", str(settings.over_current_warning_threshold)),
        ("ecThresholdLoAlmL1", str(settings.low_current_alarm_threshold)),
        ("powerUpDelay", str(settings.power_on_delay)),
        ("lockStateTypeGroup1", "1" if settings.control_lock_state else "0"),
    ]


class MPXClient:
    """Client for one Liebert MPX PDU, talking to its web interface

    Reads are plain GET requests, writes are form posts with HTTP basic
    authentication. Arguments left as ``None`` are read from the environment.
    """

    def __init__(
        self,
        host: Optional[str] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
        timeout: Optional[float] = None,
        use_tls: Optional[bool] = None,
        verify_tls: Optional[bool] = None,
        session: Optional[requests.Session] = None,
    ):
        """Initialize PDU client with arguments or environment variables"""
        self.host = host or os.getenv("MPX_HOST") or "localhost"
        self.username = username or os.getenv("MPX_USERNAME") or "Liebert"
        self.password = password or os.getenv("MPX_PASSWORD") or "Liebert"
        self.timeout = timeout if timeout is not None else _env_timeout()
        self.use_tls = use_tls if use_tls is not None else _env_flag("MPX_USE_TLS")
        self.verify_tls = (
            verify_tls if verify_tls is not None else _env_flag("MPX_VERIFY_TLS")
        )

        # A session passed in by the caller stays open after close()
        self._owns_session = session is None
        self.session = session or requests.Session()

    def __enter__(self) -> "MPXClient":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def close(self) -> None:
        """Close the HTTP session if this client created it"""
        if self._owns_session:
            self.session.close()

    @property
    def base_url(self) -> str:
        scheme = "https" if self.use_tls else "http"
        return f"{scheme}://{self.host}"

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def _get_html(self, path: str) -> str:
        """Fetch a page from the PDU"""
        url = self._url(path)
        logger.debug("GET %s", url)
        try:
            response = self.session.get(
                url, timeout=self.timeout, verify=self.verify_tls
            )
            response.raise_for_status()
        except requests.RequestException as e:
            raise MPXConnectionError(f"Failed to fetch {url}: {e}") from e
        if not 200 <= response.status_code < 300:
            raise MPXConnectionError(
                f"Failed to fetch {url}: unexpected HTTP {response.status_code}"
            )
        return response.text

    def _send_form(self, path: str, form: FormData) -> None:
        """Post a control form to the PDU"""
        url = self._url(path)
        logger.debug("POST %s %s", url, [name for name, _ in form])
        try:
            response = self.session.post(
                url,
                data=list(form),
                auth=(self.username, self.password),
                timeout=self.timeout,
                verify=self.verify_tls,
                allow_redirects=False,
            )
        except requests.RequestException as e:
            raise MPXConnectionError(f"Failed to post to {url}: {e}") from e

        if response.status_code not in ACCEPTED_STATUS_CODES:
            logger.warning("PDU rejected %s with HTTP %d", url, response.status_code)
            raise MPXCommandError(url, response.status_code)

    @staticmethod
    def _path(pdu: int, branch: int = 0, receptacle: int = 0) -> str:
        return f"/dp/std:{pdu}.{branch}.{receptacle}_0.0.0/rpc"

    # Reads

    def get_receptacles(self) -> List[ReceptacleListEntry]:
        """Get condensed information about all receptacles"""
        return parser.parse_receptacles(
            self._get_html("/rpc/rpcReceptacleListData.htm")
        )

    def get_events(self) -> List[Event]:
        """Get currently active events/alarms"""
        return parser.parse_events(self._get_html("/rpc/rpcActiveAlarms.htm"))

    def get_info_pdu(self, pdu: int) -> PDUInfo:
        """Get status, events, settings and hardware of a PDU"""
        return parser.parse_pdu_info(self._get_html(f"{self._path(pdu)}/rpcAps.htm"))

    def get_info_branch(self, pdu: int, branch: int) -> BranchInfo:
        """Get status, events, settings and hardware of a branch"""
        return parser.parse_branch_info(
            self._get_html(f"{self._path(pdu, branch)}/rpcRem.htm")
        )

    def get_info_receptacle(
        self, pdu: int, branch: int, receptacle: int
    ) -> ReceptacleInfo:
        """Get status, events, settings and hardware of a receptacle"""
        return parser.parse_receptacle_info(
            self._get_html(f"{self._path(pdu, branch, receptacle)}/rpcReceptacle.htm")
        )

    def check_connection(self):
        """Check if the PDU web interface answers with a receptacle list"""
        try:
            self.get_receptacles()
        except MPXConnectionError:
            raise
        except MPXError as e:
            raise MPXConnectionError(f"Unexpected answer from {self.host}: {e}") from e

    # Commands

    def pdu_command(self, pdu: int, cmd: PDUCommand) -> None:
        """Send a command to a PDU"""
        logger.info("Sending %s to PDU %d", cmd.value, pdu)
        self._send_form(
            f"{self._path(pdu)}/rpcControlApsCommand", PDU_COMMAND_FORMS[cmd]
        )

    def pdu_reset_energy(self, pdu: int) -> None:
        """Reset the energy counter of a PDU"""
        self.pdu_command(pdu, PDUCommand.RESET_ENERGY)

    def pdu_test_event(self, pdu: int) -> None:
        """Raise a test event on a PDU"""
        self.pdu_command(pdu, PDUCommand.TEST_EVENT)

    def branch_command(self, pdu: int, branch: int, cmd: BranchCommand) -> None:
        """Send a command to a branch"""
        logger.info("Sending %s to branch %d.%d", cmd.value, pdu, branch)
        self._send_form(
            f"{self._path(pdu, branch)}/rpcControlRemCommand",
            BRANCH_COMMAND_FORMS[cmd],
        )

    def branch_reset_energy(self, pdu: int, branch: int) -> None:
        """Reset the energy counter of a branch"""
        self.branch_command(pdu, branch, BranchCommand.RESET_ENERGY)

    def receptacle_command(
        self, pdu: int, branch: int, receptacle: int, cmd: ReceptacleCommand
    ) -> None:
        """Send a command to a receptacle"""
        logger.info(
            "Sending %s to receptacle %d.%d.%d", cmd.value, pdu, branch, receptacle
        )
        self._send_form(
            f"{self._path(pdu, branch, receptacle)}/rpcControlReceptacleCommand",
            RECEPTACLE_COMMAND_FORMS[cmd],
        )

    def receptacle_identify(self, pdu: int, branch: int, receptacle: int) -> None:
        """Blink the receptacle LED"""
        self.receptacle_command(pdu, branch, receptacle, ReceptacleCommand.IDENTIFY)

    def receptacle_reboot(self, pdu: int, branch: int, receptacle: int) -> None:
        """Power cycle the receptacle"""
        self.receptacle_command(pdu, branch, receptacle, ReceptacleCommand.REBOOT)

    def receptacle_enable(self, pdu: int, branch: int, receptacle: int) -> None:
        """Switch the receptacle on"""
        self.receptacle_command(pdu, branch, receptacle, ReceptacleCommand.ENABLE)

    def receptacle_disable(self, pdu: int, branch: int, receptacle: int) -> None:
        """Switch the receptacle off"""
        self.receptacle_command(pdu, branch, receptacle, ReceptacleCommand.DISABLE)

    def receptacle_reset_energy(self, pdu: int, branch: int, receptacle: int) -> None:
        """Reset the energy counter of a receptacle"""
        self.receptacle_command(
            pdu, branch, receptacle, ReceptacleCommand.RESET_ENERGY
        )

    # Settings

    def set_pdu_settings(self, pdu: int, settings: PDUSettings) -> None:
        """Write the settings of a PDU"""
        logger.info("Writing settings of PDU %d", pdu)
        self._send_form(
            f"{self._path(pdu)}/rpcControlApsSetting", pdu_settings_form(settings)
        )

    def set_branch_settings(
        self, pdu: int, branch: int, settings: BranchSettings
    ) -> None:
        """Write the settings of a branch"""
        logger.info("Writing settings of branch %d.%d", pdu, branch)
        self._send_form(
            f"{self._path(pdu, branch)}/rpcControlRemSetting",
            branch_settings_form(settings),
        )

    def set_receptacle_settings(
        self, pdu: int, branch: int, receptacle: int, settings: ReceptacleSettings
    ) -> None:
        """Write the settings of a receptacle"""
        logger.info("Writing settings of receptacle %d.%d.%d", pdu, branch, receptacle)
        self._send_form(
            f"{self._path(pdu, branch, receptacle)}/rpcControlReceptacleSetting",
            receptacle_settings_form(settings),
        )

    def update_pdu_settings(self, pdu: int, **changes: Any) -> PDUSettings:
        """Read the PDU settings, apply changes and write them back"""
        settings = dataclasses.replace(self.get_info_pdu(pdu).settings, **changes)
        self.set_pdu_settings(pdu, settings)
        return settings

    def update_branch_settings(
        self, pdu: int, branch: int, **changes: Any
    ) -> BranchSettings:
        """Read the branch settings, apply changes and write them back"""
        current = self.get_info_branch(pdu, branch).settings
        settings = dataclasses.replace(current, **changes)
        self.set_branch_settings(pdu, branch, settings)
        return settings

    def update_receptacle_settings(
        self, pdu: int, branch: int, receptacle: int, **changes: Any
    ) -> ReceptacleSettings:
        """Read the receptacle settings, apply changes and write them back"""
        current = self.get_info_receptacle(pdu, branch, receptacle).settings
        settings = dataclasses.replace(current, **changes)
        self.set_receptacle_settings(pdu, branch, receptacle, settings)
        return settings
