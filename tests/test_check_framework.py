"""
SysGuard - Check Framework Tests

Integration tests for the check framework, catalogue, and base classes.
"""

import pytest
import sys
from pathlib import Path
from unittest import mock

# Add project root to import path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from sysguard.core.catalogue import Catalogue, default_catalogue
from sysguard.core.check import BaseCheck, CatalogueError, CheckReport
from sysguard.core.facts import CollectionFailure, StaticFactCollector
from sysguard.core.findings import Mark, render_marks
from sysguard.core.profile import load_profile


PROFILE = load_profile(profile_id="base")


class BannerCheck(BaseCheck):
    """Small check reading one file."""

    id = "banner"
    name = "Banner"
    description = "Reads a banner"
    title_key = "X1"
    title = "Banner"
    keys = ("X1", "Y1")

    def evaluate(self, collector):
        text = self.read_file(collector, "/etc/motd")
        return {"Y1": render_marks([(Mark.from_bool(text is not None), "Banner is set")])}


class CrashingCheck(BaseCheck):
    """Check whose evaluator raises."""

    id = "crashing"
    name = "Crashing"
    description = "Always raises"
    title_key = "X2"
    title = "Crashing"
    keys = ("X2", "Y2")

    def evaluate(self, collector):
        raise RuntimeError("parser bug")


class StrayKeyCheck(BaseCheck):
    """Check returning a key it does not own."""

    id = "stray"
    name = "Stray"
    description = "Writes outside its keys"
    keys = ("X3",)

    def evaluate(self, collector):
        return {"X3": "ok", "Z9": "not mine"}


class TestCheckReport:
    """Tests for the CheckReport dataclass."""

    def test_report_validation_empty_id(self) -> None:
        """Test that empty check_id raises ValueError."""
        with pytest.raises(ValueError, match="check_id cannot be empty"):
            CheckReport(check_id="", check_name="Test")

    def test_report_validation_empty_name(self) -> None:
        """Test that empty check_name raises ValueError."""
        with pytest.raises(ValueError, match="check_name cannot be empty"):
            CheckReport(check_id="test", check_name="")

    def test_mark_counts_and_passed(self) -> None:
        report = CheckReport(
            check_id="test",
            check_name="Test",
            findings={"A1": "Title", "B1": "[✓] a\n[✗] b\n[  ] c"},
        )
        assert report.mark_counts == (1, 1)
        assert report.passed is False
        assert report.degraded is False

    def test_degraded(self) -> None:
        report = CheckReport(
            check_id="test",
            check_name="Test",
            failures=[CollectionFailure("/etc/passwd")],
        )
        assert report.degraded is True
        assert report.passed is True

    def test_to_dict(self) -> None:
        report = CheckReport(
            check_id="test",
            check_name="Test",
            findings={"A1": "Title"},
            failures=[CollectionFailure("/etc/passwd", "Permission denied")],
        )
        assert report.to_dict() == {
            "id": "test",
            "name": "Test",
            "findings": {"A1": "Title"},
            "failures": [{"source": "/etc/passwd", "reason": "Permission denied"}],
            "error": None,
        }


class TestBaseCheckDefinition:
    """Tests for class-level validation of checks."""

    def test_missing_id(self) -> None:
        with pytest.raises(CatalogueError, match="must define 'id'"):
            class NoId(BaseCheck):
                name = "x"
                description = "x"
                keys = ("K1",)

                def evaluate(self, collector):
                    return {}

    def test_missing_keys(self) -> None:
        with pytest.raises(CatalogueError, match="must define 'keys'"):
            class NoKeys(BaseCheck):
                id = "no_keys"
                name = "x"
                description = "x"

                def evaluate(self, collector):
                    return {}

    def test_invalid_id(self) -> None:
        with pytest.raises(CatalogueError, match="lowercase"):
            class BadId(BaseCheck):
                id = "Bad-Id"
                name = "x"
                description = "x"
                keys = ("K1",)

                def evaluate(self, collector):
                    return {}

    def test_duplicate_key(self) -> None:
        with pytest.raises(CatalogueError, match="twice"):
            class DupKeys(BaseCheck):
                id = "dup_keys"
                name = "x"
                description = "x"
                keys = ("K1", "K1")

                def evaluate(self, collector):
                    return {}

    def test_title_key_not_owned(self) -> None:
        with pytest.raises(CatalogueError, match="title key"):
            class BadTitle(BaseCheck):
                id = "bad_title"
                name = "x"
                description = "x"
                title_key = "T1"
                keys = ("K1",)

                def evaluate(self, collector):
                    return {}


class TestBaseCheckExecution:
    """Tests for BaseCheck.execute."""

    def test_execute_fills_every_key(self) -> None:
        collector = StaticFactCollector(files={"/etc/motd": "hello"})
        report = BannerCheck(profile=PROFILE).execute(collector)

        assert report.findings == {"X1": "Banner", "Y1": "[✓] Banner is set"}
        assert report.failures == []

    def test_execute_records_unavailable_fact(self) -> None:
        report = BannerCheck(profile=PROFILE).execute(StaticFactCollector())

        assert report.findings["Y1"] == "[✗] Banner is set"
        assert [f.source for f in report.failures] == ["/etc/motd"]
        assert report.degraded is True

    def test_execute_resets_failures(self) -> None:
        check = BannerCheck(profile=PROFILE)
        check.execute(StaticFactCollector())
        report = check.execute(StaticFactCollector(files={"/etc/motd": "hello"}))
        assert report.failures == []

    def test_evaluator_error_keeps_keys(self) -> None:
        """A crashing evaluator still yields the declared keys."""
        report = CrashingCheck(profile=PROFILE).execute(StaticFactCollector())

        assert report.findings == {"X2": "Crashing", "Y2": ""}
        assert report.error == "RuntimeError: parser bug"
        assert report.degraded is True

    def test_stray_key_raises(self) -> None:
        with pytest.raises(CatalogueError, match="Z9"):
            StrayKeyCheck(profile=PROFILE).execute(StaticFactCollector())

    def test_fact_unavailable_logs_warning(self) -> None:
        logger = mock.MagicMock()
        check = BannerCheck(profile=PROFILE, logger=logger)
        check.execute(StaticFactCollector())
        logger.warning.assert_called_once()


class TestCatalogue:
    """Tests for the Catalogue class."""

    def test_register_and_order(self) -> None:
        catalogue = Catalogue([CrashingCheck, BannerCheck])

        assert catalogue.get_check_ids() == ["crashing", "banner"]
        assert len(catalogue) == 2
        assert catalogue.get_check("banner") is BannerCheck
        assert catalogue.get_check("missing") is None

    def test_register_non_check(self) -> None:
        catalogue = Catalogue()
        with pytest.raises(TypeError):
            catalogue.register(object)  # type: ignore[arg-type]
        with pytest.raises(TypeError):
            catalogue.register("banner")  # type: ignore[arg-type]

    def test_duplicate_id(self) -> None:
        catalogue = Catalogue([BannerCheck])
        with pytest.raises(CatalogueError, match="already registered"):
            catalogue.register(BannerCheck)

    def test_key_collision(self) -> None:
        class OtherBanner(BaseCheck):
            id = "other_banner"
            name = "Other"
            description = "Claims Y1 too"
            keys = ("Y1",)

            def evaluate(self, collector):
                return {}

        catalogue = Catalogue([BannerCheck])
        with pytest.raises(CatalogueError, match="already owned"):
            catalogue.register(OtherBanner)

    def test_subset(self) -> None:
        catalogue = Catalogue([CrashingCheck, BannerCheck])
        subset = catalogue.subset(["banner", "crashing"])

        # Catalogue order is kept, not the order asked for.
        assert subset.get_check_ids() == ["crashing", "banner"]
        with pytest.raises(KeyError, match="nope"):
            catalogue.subset(["nope"])

    def test_run_all_with_progress(self) -> None:
        catalogue = Catalogue([BannerCheck, CrashingCheck])
        events = []

        def callback(event_type, check_id, check_name, report):
            events.append((event_type, check_id, report is not None))

        reports = catalogue.run_all(StaticFactCollector(), profile=PROFILE, progress_callback=callback)

        assert [r.check_id for r in reports] == ["banner", "crashing"]
        assert events == [
            ("start", "banner", False),
            ("complete", "banner", True),
            ("start", "crashing", False),
            ("complete", "crashing", True),
        ]


class TestDefaultCatalogue:
    """Tests for the shipped catalogue."""

    def test_catalogue_order(self) -> None:
        assert default_catalogue().get_check_ids() == [
            "os",
            "ip",
            "user_mgmt",
            "passwd_complexity",
            "operation_timeout",
            "port",
            "service",
            "audit",
            "iptables",
            "command_history",
        ]

    def test_catalogue_keys(self) -> None:
        assert sorted(key for check_class in default_catalogue() for key in check_class.keys) == sorted([
            "A4", "B4", "A5", "B5", "A8", "B8", "B9", "C9", "A10", "B10",
            "A11", "B11", "A14", "B14", "A15", "B15", "C15", "A19", "B19",
            "A21", "C21", "A25", "B25",
        ])
