HISTORY_LIMIT = 20


class History:
    """
    Bounded list of terrain snapshots with a cursor.

    index == -1 is the state before any recorded edit (an empty map).
    """

    def __init__(self, limit=HISTORY_LIMIT):
        self.limit = limit
        self.entries = []
        self.index = -1

    def __len__(self):
        return len(self.entries)

    @property
    def can_undo(self):
        return self.index > -1

    @property
    def can_redo(self):
        return self.index < len(self.entries) - 1

    def reset(self, initial=None):
        self.entries = [] if initial is None else [dict(initial)]
        self.index = len(self.entries) - 1

    def push(self, snapshot):
        self.entries = self.entries[:self.index + 1]
        self.entries.append(dict(snapshot))
        if len(self.entries) > self.limit:
            self.entries.pop(0)
        self.index = len(self.entries) - 1

    def undo(self):
        """Steps back and returns the snapshot to restore, or None if there is nothing to undo."""
        if self.index > 0:
            self.index -= 1
            return dict(self.entries[self.index])
        if self.index == 0:
            self.index = -1
            return {}
        return None

    def redo(self):
        if self.can_redo:
            self.index += 1
            return dict(self.entries[self.index])
        return None
