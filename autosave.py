import logging
import time
from enum import Enum

log = logging.getLogger(__name__)

AUTOSAVE_DELAY = 2.0


class SaveStatus(str, Enum):
    IDLE = "Saved"
    UNSAVED = "Unsaved"
    SAVING = "Saving..."
    ERROR = "Error"


class AutoSaver:
    """
    Debounced save: every change re-arms a deadline, the save runs once things go quiet.

    `poll()` is driven by the UI loop; nothing here owns a thread or a timer.
    """

    def __init__(self, save_fn, delay=AUTOSAVE_DELAY, clock=time.monotonic):
        self.save_fn = save_fn
        self.delay = delay
        self.clock = clock
        self.deadline = None
        self.status = SaveStatus.IDLE
        self.last_error = None

    @property
    def armed(self):
        return self.deadline is not None

    def mark_dirty(self):
        self.deadline = self.clock() + self.delay
        self.status = SaveStatus.UNSAVED

    def cancel(self):
        self.deadline = None

    def poll(self):
        """Runs the save if the deadline has passed. Returns True when a save was attempted."""
        if self.deadline is None or self.clock() < self.deadline:
            return False
        self.flush()
        return True

    def flush(self):
        self.deadline = None
        self.status = SaveStatus.SAVING
        try:
            self.save_fn()
        except Exception as e:
            # Surfaced through status only, the next edit re-arms the timer
            log.error("Auto-save failed: %s", e)
            self.last_error = e
            self.status = SaveStatus.ERROR
            return False
        self.last_error = None
        self.status = SaveStatus.IDLE
        return True
