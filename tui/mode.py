"""
BrowserMode - Textual implementation of InteractionMode for pkgbrowse.

The session is expected to be loaded already; this mode only owns the
terminal for as long as the app runs.
"""

from base_classes import InteractionMode


class BrowserMode(InteractionMode):
    """
    Full-screen browser using Textual.

    A fatal error raised inside the app (for instance a terminal that is too
    small) stops the app and is re-raised here once the terminal is restored.
    """

    def __init__(self, session):
        self.session = session
        self.app = None

    def start(self):
        from .app import BrowserApp
        self.app = BrowserApp(self.session)
        self.app.run()
        if self.app.fatal is not None:
            raise self.app.fatal
