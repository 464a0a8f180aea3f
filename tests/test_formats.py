"""Tests for file-level configuration patching."""
import tempfile
import threading
import time
from pathlib import Path
from unittest.mock import patch

import pytest
from devenv_init.core.line_store import LineStore
from devenv_init.core.planner import ActionKind, ConfigEdit
from devenv_init.errors import FileAccessError
from devenv_init.formats.config_file import (
    ConfigFileEditor,
    apply_config_patch,
    patch_text,
)
from hypothesis import given
from hypothesis import strategies as st

EXT_NODE_CONFIG = """# External node settings
[en]
l1_chain_id=9
l1_batch_commit_data_generator_mode=Validium
# Main node URL
main_node_url=http://127.0.0.1:3050

[rust]
log_format=plain
"""


class TestConfigFileEditor:
    """Test config file editor functionality."""

    def setup_method(self) -> None:
        """Set up test environment."""
        self.temp_dir = tempfile.mkdtemp()
        self.test_file = Path(self.temp_dir) / "config.toml"

    def teardown_method(self) -> None:
        """Clean up test environment."""
        import shutil

        shutil.rmtree(self.temp_dir)

    def test_insert_into_section(self) -> None:
        """A new key scoped to a section lands right under its header."""
        self.test_file.write_text("[en]\nfoo=1")

        apply_config_patch(self.test_file, [ConfigEdit("bar", 2, "en")])

        assert self.test_file.read_text() == "[en]\nbar=2\nfoo=1"

    def test_append_without_section(self) -> None:
        """A new unscoped key becomes a new trailing line."""
        self.test_file.write_text("foo=1")

        apply_config_patch(self.test_file, [ConfigEdit("baz", 3)])

        assert self.test_file.read_text().splitlines() == ["foo=1", "baz=3"]

    def test_mode_toggle_removal(self) -> None:
        """Removing the commit mode key drops only that line."""
        self.test_file.write_text(EXT_NODE_CONFIG)

        apply_config_patch(
            self.test_file, [ConfigEdit("l1_batch_commit_data_generator_mode", None)]
        )

        expected = EXT_NODE_CONFIG.replace(
            "l1_batch_commit_data_generator_mode=Validium\n", ""
        )
        assert self.test_file.read_text() == expected

    def test_empty_batch_round_trip(self) -> None:
        """Patching with no edits leaves content unchanged."""
        self.test_file.write_text(EXT_NODE_CONFIG)

        actions = apply_config_patch(self.test_file, [])

        assert actions == []
        assert self.test_file.read_text() == EXT_NODE_CONFIG

    def test_delete_absent_key_is_noop(self) -> None:
        """Deleting an absent key twice never changes the file."""
        self.test_file.write_text(EXT_NODE_CONFIG)
        editor = ConfigFileEditor(self.test_file)

        with patch("devenv_init.formats.config_file.write_locked") as writer:
            first = editor.apply([ConfigEdit("absent", None)])
            second = editor.apply([ConfigEdit("absent", None)])

        writer.assert_not_called()
        assert [a.kind for a in first + second] == [ActionKind.NOOP, ActionKind.NOOP]
        assert self.test_file.read_text() == EXT_NODE_CONFIG

    def test_replace_preserves_shape(self) -> None:
        """Replacing a value changes exactly one line."""
        self.test_file.write_text(EXT_NODE_CONFIG)

        apply_config_patch(self.test_file, [ConfigEdit("l1_chain_id", 270)])

        before = EXT_NODE_CONFIG.split("\n")
        after = self.test_file.read_text().split("\n")
        assert len(before) == len(after)
        changed = [i for i, (a, b) in enumerate(zip(before, after)) if a != b]
        assert changed == [2]
        assert after[2] == "l1_chain_id=270"

    def test_comments_preserved(self) -> None:
        """Comment lines survive a mixed batch verbatim and in order."""
        self.test_file.write_text(EXT_NODE_CONFIG)

        apply_config_patch(
            self.test_file,
            [
                ConfigEdit("l1_chain_id", None),
                ConfigEdit("api_port", 3060, "en"),
                ConfigEdit("log_format", "json"),
            ],
        )

        lines = self.test_file.read_text().split("\n")
        comments = [line for line in lines if line.startswith("#")]
        assert comments == ["# External node settings", "# Main node URL"]
        assert lines[:3] == ["# External node settings", "[en]", "api_port=3060"]
        assert "log_format=json" in lines

    def test_commented_key_not_touched(self) -> None:
        """A commented-out key is not matched; the new key is appended."""
        self.test_file.write_text("# foo=1\nbar=2\n")

        apply_config_patch(self.test_file, [ConfigEdit("foo", 5)])

        assert self.test_file.read_text() == "# foo=1\nbar=2\nfoo=5\n"

    def test_unresolved_section_appends(self) -> None:
        """An unknown section falls back to appending at the end."""
        self.test_file.write_text("[en]\nfoo=1\n")

        apply_config_patch(self.test_file, [ConfigEdit("bar", 2, "missing")])

        assert self.test_file.read_text() == "[en]\nfoo=1\nbar=2\n"

    def test_multiple_appends_keep_order(self) -> None:
        """Every appended entry is written, in batch order."""
        self.test_file.write_text("a=1\n")

        apply_config_patch(self.test_file, [ConfigEdit("b", 2), ConfigEdit("c", 3)])

        assert self.test_file.read_text() == "a=1\nb=2\nc=3\n"

    def test_repeated_insert_duplicates_line(self) -> None:
        """Inserted keys are not indexed, so a second insert adds another line."""
        self.test_file.write_text("[en]\nfoo=1")

        apply_config_patch(
            self.test_file, [ConfigEdit("bar", 1, "en"), ConfigEdit("bar", 2, "en")]
        )

        assert self.test_file.read_text() == "[en]\nbar=2\nbar=1\nfoo=1"

    def test_crlf_lines_round_trip(self) -> None:
        """Windows line endings are not normalized on unrelated lines."""
        self.test_file.write_bytes(b"[en]\r\nfoo=1\r\nbar=2\r\n")

        apply_config_patch(self.test_file, [ConfigEdit("bar", None)])

        assert self.test_file.read_bytes() == b"[en]\r\nfoo=1\r\n"

    def test_crlf_replace_insert_append_keep_endings(self) -> None:
        """Lines written into a CRLF file end with CRLF too."""
        self.test_file.write_bytes(b"[en]\r\nfoo=1\r\n")

        apply_config_patch(
            self.test_file,
            [
                ConfigEdit("foo", 2),
                ConfigEdit("bar", 3, "en"),
                ConfigEdit("baz", 4),
            ],
        )

        assert self.test_file.read_bytes() == (
            b"[en]\r\nbar=3\r\nfoo=2\r\nbaz=4\r\n"
        )

    def test_no_lock_file_next_to_config(self) -> None:
        """Patching leaves nothing but the config file in its directory."""
        self.test_file.write_text("a=1\n")

        apply_config_patch(self.test_file, [ConfigEdit("a", 2)])

        assert [p.name for p in Path(self.temp_dir).iterdir()] == ["config.toml"]

    def test_concurrent_patch_waits_for_lock(self) -> None:
        """A patch started mid-way through another applies on top of its result."""
        self.test_file.write_text("a=1\nb=1\n")
        original_load = LineStore.load
        started = threading.Event()
        errors = []

        def second_patch() -> None:
            try:
                apply_config_patch(self.test_file, [ConfigEdit("b", 2)])
            except Exception as e:
                errors.append(e)

        worker = threading.Thread(target=second_patch)

        def load_then_interleave(file_path, encoding="utf-8"):
            if not started.is_set():
                started.set()
                worker.start()
                time.sleep(0.3)
            return original_load(file_path, encoding)

        with patch.object(LineStore, "load", side_effect=load_then_interleave):
            apply_config_patch(self.test_file, [ConfigEdit("a", 2)])
            worker.join(timeout=10)

        assert errors == []
        assert self.test_file.read_text() == "a=2\nb=2\n"

    def test_preview_does_not_write(self) -> None:
        """Preview returns new text and leaves the file alone."""
        self.test_file.write_text("[en]\nfoo=1")
        editor = ConfigFileEditor(self.test_file)

        preview = editor.preview([ConfigEdit("foo", 2)])

        assert preview == "[en]\nfoo=2"
        assert self.test_file.read_text() == "[en]\nfoo=1"

    def test_missing_file_raises(self) -> None:
        """Reading a missing file raises FileAccessError."""
        missing = Path(self.temp_dir) / "missing.toml"

        with pytest.raises(FileAccessError) as exc_info:
            apply_config_patch(missing, [ConfigEdit("a", 1)])

        assert exc_info.value.path == missing

    def test_failed_replace_keeps_original(self) -> None:
        """A failing replace leaves the original file and no temp files."""
        self.test_file.write_text("foo=1\n")

        with patch("os.replace", side_effect=OSError("No space left on device")):
            with pytest.raises(FileAccessError):
                apply_config_patch(self.test_file, [ConfigEdit("foo", 2)])

        assert self.test_file.read_text() == "foo=1\n"
        leftovers = [p.name for p in Path(self.temp_dir).iterdir() if p.suffix == ".tmp"]
        assert leftovers == []


class TestPatchText:
    """Property tests for in-memory patching."""

    @given(st.text())
    def test_empty_batch_is_identity(self, text: str) -> None:
        assert patch_text(text, []) == text

    @given(st.text(alphabet="abc =#[]\n\t"))
    def test_delete_absent_key_is_identity(self, text: str) -> None:
        edits = [ConfigEdit("zz_missing", None)]
        once = patch_text(text, edits)
        assert once == text
        assert patch_text(once, edits) == once

    @given(
        st.lists(
            st.from_regex(r"[a-z]{1,8}", fullmatch=True), min_size=2, unique=True
        ),
        st.data(),
    )
    def test_delete_removes_exactly_one_line(self, keys: list[str], data) -> None:
        text = "\n".join(f"{key}={i}" for i, key in enumerate(keys))
        target = data.draw(st.sampled_from(keys))

        result = patch_text(text, [ConfigEdit(target, None)])

        expected = [f"{key}={i}" for i, key in enumerate(keys) if key != target]
        assert result.split("\n") == expected

    @given(
        st.lists(
            st.from_regex(r"[a-z]{1,8}", fullmatch=True), min_size=1, unique=True
        ),
        st.integers(min_value=0, max_value=5),
    )
    def test_section_insert_lands_below_header(
        self, keys: list[str], padding: int
    ) -> None:
        body = [f"{key}=1" for key in keys]
        lines = ["x=0"] * padding + ["[target]"] + body
        new_key = "new_" + keys[0]

        result = patch_text("\n".join(lines), [ConfigEdit(new_key, 9, "target")])

        out = result.split("\n")
        header = out.index("[target]")
        assert out[header + 1] == f"{new_key}=9"
        assert out[header + 2] == body[0]
        assert len(out) == len(lines) + 1
