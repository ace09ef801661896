"""Tests for the EN/TH translator."""

from __future__ import annotations

from engines.i18n import TRANSLATIONS, Translator


class TestTranslator:
    def test_english_default(self) -> None:
        assert Translator().t("metric.breakEven") == "Break-Even"

    def test_thai(self) -> None:
        assert Translator("th").t("freq.monthly") == "รายเดือน"

    def test_falls_back_to_english_then_key(self) -> None:
        tr = Translator("th")
        assert tr.t("metric.roi") == "Year 1 ROI"
        assert tr.t("no.such.key") == "no.such.key"

    def test_placeholders(self) -> None:
        assert Translator().t("chart.month", n=3) == "Month 3"
        assert Translator("th").t("chart.month", n=3) == "เดือน 3"
        assert Translator().t("toast.scenarioSaved", name="Q3") == 'Scenario "Q3" saved'

    def test_set_language(self) -> None:
        tr = Translator()
        assert tr.set_language("th") is True
        assert tr.language == "th"
        assert tr.set_language("fr") is False
        assert tr.language == "th"

    def test_unsupported_initial_language(self) -> None:
        assert Translator("de").language == "en"

    def test_instances_independent(self) -> None:
        """No shared module-level language."""
        a, b = Translator("en"), Translator("th")
        assert a.t("freq.yearly") != b.t("freq.yearly")

    def test_table_merges_fallbacks(self) -> None:
        table = Translator("th").table()
        assert table["metric.roi"] == TRANSLATIONS["en"]["metric.roi"]
        assert table["freq.yearly"] == "รายปี"

    def test_frequency_and_channel_labels(self) -> None:
        tr = Translator()
        assert tr.frequency_label("per-agent") == "Per Agent"
        assert tr.frequency_label("???") == "Monthly"
        assert tr.channel_label("IVR") == "IVR"
        assert tr.channel_label(None) == "N/A"
