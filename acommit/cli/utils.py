"""CLI Utility Functions"""

import os
import signal
import subprocess
import sys
import tempfile
import threading
from contextlib import contextmanager


def edit_message(message: str) -> str | None:
    """Open message in the user's editor. Returns edited text or None on failure."""
    editor = os.environ.get('VISUAL') or os.environ.get('EDITOR')
    if not editor:
        editor = 'notepad' if sys.platform == 'win32' else 'vi'

    tmp = tempfile.NamedTemporaryFile(mode='w', suffix='.gitcommit', delete=False, encoding='utf-8')
    try:
        tmp.write(message)
        tmp.close()
        subprocess.run([*editor.split(), tmp.name], check=True)
        with open(tmp.name, 'r', encoding='utf-8') as f:
            lines = [line for line in f.read().splitlines() if not line.startswith('#')]
        edited = '\n'.join(lines).strip()
        return edited if edited else None
    except (subprocess.CalledProcessError, OSError):
        return None
    finally:
        try:
            os.unlink(tmp.name)
        except OSError as e:
            print(f"Warning: Could not delete temp file {tmp.name}: {e}", file=sys.stderr)


@contextmanager
def deferred_interrupt():
    """Hold Ctrl-C while the block runs.

    Yields a list that collects the signals received, so the caller can
    decide afterwards whether the interrupt still matters. Used around
    ``git add`` + ``git commit`` so an interrupt can't land between the
    two. Outside the main thread signals can't be rebound, so the block
    just runs as-is.
    """
    received = []
    if threading.current_thread() is not threading.main_thread():
        yield received
        return

    def _hold(signum, frame):
        received.append(signum)

    previous = signal.signal(signal.SIGINT, _hold)
    try:
        yield received
    finally:
        signal.signal(signal.SIGINT, previous)
