"""Tests for terminal playback, driven through an in-memory stream."""

import io

from gifascii import ascii_player
from gifascii.ascii_player import AsciiPlayer


class TestAsciiPlayer:

    def test_plays_each_frame_once(self):
        stream = io.StringIO()
        AsciiPlayer([["ab"], ["cd"]], [10, 10], loop_count=None, stream=stream).play()
        output = stream.getvalue()
        assert output.index("ab") < output.index("cd")
        assert output.count("ab") == 1
        assert output.endswith(ascii_player.SHOW_CURSOR + ascii_player.CLEAR_SCREEN)

    def test_loop_count(self):
        stream = io.StringIO()
        AsciiPlayer([["xy"]], [10], loop_count=3, stream=stream).play()
        assert stream.getvalue().count("xy") == 3

    def test_iterations(self):
        assert AsciiPlayer([], [], loop_count=0).iterations() is None
        assert AsciiPlayer([], [], loop_count=None, repeat=True).iterations() is None
        assert AsciiPlayer([], [], loop_count=2).iterations() == 2

    def test_frame_delay_fallbacks(self):
        player = AsciiPlayer([["a"], ["b"]], [30])
        assert player.frame_delay(0) == 30
        assert player.frame_delay(1) == 30
        assert AsciiPlayer([["a"]], []).frame_delay(0) == ascii_player.DEFAULT_DELAY_MS

    def test_exit_key_stops_playback(self, monkeypatch):
        stream = io.StringIO()
        player = AsciiPlayer([["one"], ["two"]], [10, 10], loop_count=0, stream=stream)
        monkeypatch.setattr(player, "check_for_keypress", lambda: "q")
        player.play()
        assert "one" in stream.getvalue()
        assert "two" not in stream.getvalue()

    def test_resize_swaps_frames(self, monkeypatch):
        widths = iter([80, 40, 40])
        monkeypatch.setattr(ascii_player, "terminal_columns", lambda: next(widths))
        requested = []

        def on_resize(columns):
            requested.append(columns)
            return [["small-1"], ["small-2"], ["small-3"]]

        stream = io.StringIO()
        AsciiPlayer([["big-1"], ["big-2"], ["big-3"]], [10, 10, 10], stream=stream, on_resize=on_resize).play()
        output = stream.getvalue()
        assert requested == [40]
        assert "big-1" in output
        assert "big-2" not in output
        assert "small-2" in output and "small-3" in output
