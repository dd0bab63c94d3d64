"""Tests for the vendor string enums and records in :mod:`liebert_mpx.models`."""

import unittest

from liebert_mpx.models import (
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
    PEMModel,
    ReceptacleListEntry,
    ReceptacleType,
    WiringType,
)


class VendorEnumTests(unittest.TestCase):
    def test_wiring_type(self):
        """Wiring types parse from the long vendor text and display short."""
        wiring = WiringType.from_str("1-Phase / 3-Wire (L, N, PE)")

        self.assertIs(wiring, WiringType.ONE_PHASE)
        self.assertEqual(str(wiring), "1-Phase")
        self.assertEqual(str(WiringType.THREE_PHASE), "3-Phase")

    def test_receptacle_type_display(self):
        self.assertIs(ReceptacleType.from_str("IEC 60320 Sheet F C13"), ReceptacleType.C13)
        self.assertEqual(str(ReceptacleType.C13), "C13")
        self.assertEqual(str(ReceptacleType.SCHUKO), "Schuko")

    def test_line_source_and_capability_display(self):
        self.assertEqual(str(LineSource.from_str("Type L3-N")), "L3-N")
        self.assertEqual(str(Capability.MEASURE_AND_CONTROL), "Measure & Control")

    def test_models(self):
        """Model strings carry a vendor prefix which is not part of the member name."""
        self.assertIs(PEMModel.from_str("MPXPEM-EHBXXZ30"), PEMModel.EHBXXZ30)
        self.assertIs(BRMModel.from_str("MPXBRM-EBBC3P2N"), BRMModel.EBBC3P2N)
        self.assertEqual(len(PEMModel), 8)
        self.assertEqual(len(BRMModel), 27)

    def test_event_types(self):
        self.assertEqual(len(EventType), 19)
        self.assertIs(EventType.from_str("PDU Neutral Over Current"), EventType.PDU_OVER_CURRENT_N)
        self.assertIs(EventType.from_str("Branch Low Voltage (LN)"), EventType.BRANCH_LOW_VOLTAGE)

    def test_unknown_string_is_rejected(self):
        """Unknown vendor strings raise InvalidDataError, which is an MPXError."""
        with self.assertRaises(InvalidDataError):
            ReceptacleType.from_str("NEMA 5-15")
        with self.assertRaises(MPXError):
            WiringType.from_str("")

    def test_event_level_from_icon_path(self):
        """Only the icon file name decides the level, not its relative path."""
        self.assertIs(EventLevel.from_icon("../../../images/accept.png"), EventLevel.OK)
        self.assertIs(EventLevel.from_icon("/images/information.png"), EventLevel.INFO)
        self.assertIs(EventLevel.from_icon("warn.png"), EventLevel.WARNING)
        self.assertIs(EventLevel.from_icon("../../../images/err.png"), EventLevel.ALARM)
        with self.assertRaises(InvalidDataError):
            EventLevel.from_icon("../../../images/spinner.gif")


class FirmwareVersionTests(unittest.TestCase):
    def test_parse_and_display(self):
        version = FirmwareVersion.from_str("1-2-0-17")

        self.assertEqual(version, FirmwareVersion(1, 2, 0, 17))
        self.assertEqual(str(version), "1.2.0.17")

    def test_wrong_part_count(self):
        with self.assertRaises(MissingDataError):
            FirmwareVersion.from_str("1-2-0")

    def test_invalid_parts(self):
        """Parts must be numbers that fit into a byte."""
        with self.assertRaises(InvalidDataError):
            FirmwareVersion.from_str("1-2-x-4")
        with self.assertRaises(InvalidDataError):
            FirmwareVersion.from_str("1-2-256-4")
        with self.assertRaises(InvalidDataError):
            FirmwareVersion.from_str("1-+2-0-4")


class RecordTests(unittest.TestCase):
    def test_as_dict_uses_enum_names(self):
        """Records dump to JSON friendly dicts."""
        event = Event(
            level=EventLevel.WARNING,
            pdu=1,
            branch=2,
            receptacle=0,
            event=EventType.BRANCH_OVER_CURRENT,
        )

        self.assertEqual(
            event.as_dict(),
            {
                "level": "WARNING",
                "pdu": 1,
                "branch": 2,
                "receptacle": 0,
                "event": "BRANCH_OVER_CURRENT",
            },
        )

    def test_as_dict_keeps_plain_values(self):
        entry = ReceptacleListEntry(
            pdu=1, branch=1, receptacle=4, enabled=True, locked=False,
            status=EventLevel.OK, label="Switch",
        )

        data = entry.as_dict()
        self.assertIs(data["enabled"], True)
        self.assertEqual(data["label"], "Switch")
        self.assertEqual(data["status"], "OK")


if __name__ == "__main__":
    unittest.main()
