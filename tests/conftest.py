"""Shared pytest fixtures for bankforge tests.

Banks are created in throwaway invocation roots laid out like a real
project (generated/banks/<author>.<name>/{bank.toml,audio/}).
"""

import tempfile
import wave
from pathlib import Path

import pytest


def write_wav(path: Path, frames: int = 2205, sample_rate: int = 22050) -> Path:
    """Write a tiny mono 16-bit WAV of silence (0.1s by default)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with wave.open(str(path), "wb") as wf:
        wf.setnchannels(1)
        wf.setsampwidth(2)
        wf.setframerate(sample_rate)
        wf.writeframes(b"\x00" * frames * 2)
    return path


def manifest_text(
    author: str = "alice",
    name: str = "drums",
    description: str | None = "Test kit",
) -> str:
    """Render a minimal bank.toml."""
    lines = ["[bank]", f'name = "{name}"', f'author = "{author}"']
    if description is not None:
        lines.append(f'description = "{description}"')
    lines.append('version = "0.0.1"')
    lines.append('access = "public"')
    return "\n".join(lines) + "\n"


def create_bank(
    root: Path,
    author: str = "alice",
    name: str = "drums",
    audio_files: tuple[str, ...] = ("kick.wav",),
    manifest: str | None = None,
    with_audio_dir: bool = True,
) -> Path:
    """Create generated/banks/<author>.<name> under root.

    Args:
        root: Invocation root.
        author: [bank].author.
        name: [bank].name.
        audio_files: Relative paths under audio/; .wav files get real WAV
            content, anything else gets a few bytes of text.
        manifest: Full bank.toml text (default: manifest_text(author, name)).
        with_audio_dir: Create audio/ at all.

    Returns:
        The bank directory.
    """
    bank_dir = root / "generated" / "banks" / f"{author}.{name}"
    bank_dir.mkdir(parents=True, exist_ok=True)
    (bank_dir / "bank.toml").write_text(
        manifest if manifest is not None else manifest_text(author, name), encoding="utf-8"
    )
    if with_audio_dir:
        audio_dir = bank_dir / "audio"
        audio_dir.mkdir(exist_ok=True)
        for rel in audio_files:
            target = audio_dir / rel
            if target.suffix.lower() == ".wav":
                write_wav(target)
            else:
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_bytes(b"not really audio")
    return bank_dir


@pytest.fixture
def workspace():
    """An empty invocation root, removed after the test.

    Yields:
        Path: The root directory.
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def make_bank(workspace):
    """Factory creating banks under the workspace root.

    Accepts the keyword arguments of create_bank(); root defaults to the
    workspace.
    """

    def _make(root: Path | None = None, **kwargs) -> Path:
        return create_bank(root if root is not None else workspace, **kwargs)

    return _make


@pytest.fixture
def audio_dir():
    """An empty audio directory, removed after the test.

    Yields:
        Path: The audio directory.
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "audio"
        path.mkdir()
        yield path
