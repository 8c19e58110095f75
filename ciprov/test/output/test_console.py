"""Tests for ciprov.output.console module."""

from __future__ import annotations

import pytest

from ciprov.output.console import MockConsole, RichConsole, Style


class TestMockConsole:
    def test_records_styles(self) -> None:
        console = MockConsole()

        console.print("plain")
        console.success("done")
        console.error("broken")
        console.warning("careful")
        console.info("note")
        console.header("Setup sccache")

        assert console.messages == [
            "plain",
            "OK done",
            "error: broken",
            "warning: careful",
            "info: note",
            "Setup sccache",
        ]
        assert [o.style for o in console.outputs] == [
            Style.DEFAULT,
            Style.SUCCESS,
            Style.ERROR,
            Style.WARNING,
            Style.INFO,
            Style.HEADER,
        ]
        assert console.has_error()

    def test_debug_respects_verbose(self) -> None:
        quiet = MockConsole(verbose=False)
        quiet.debug("hidden")
        loud = MockConsole()
        loud.debug("shown")

        assert quiet.outputs == []
        assert loud.find("shown")[0].style == Style.DIM

    def test_text_and_find(self) -> None:
        console = MockConsole()
        console.print("'sccache' installed: none, latest: 0.2.15")
        console.print("other")

        assert "latest: 0.2.15" in console.text
        assert len(console.find("sccache")) == 1


class TestRichConsole:
    def test_markup_in_messages_is_literal(self, capsys: pytest.CaptureFixture[str]) -> None:
        console = RichConsole()

        console.error("bad [red]value[/red]")
        console.print("[bold]raw[/bold]")

        out = capsys.readouterr().out
        assert "[red]value[/red]" in out
        assert "[bold]raw[/bold]" in out

    def test_debug_hidden_unless_verbose(self, capsys: pytest.CaptureFixture[str]) -> None:
        RichConsole().debug("quiet detail")
        RichConsole(verbose=True).debug("loud detail")

        out = capsys.readouterr().out
        assert "quiet detail" not in out
        assert "loud detail" in out
