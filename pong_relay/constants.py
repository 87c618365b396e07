ROLE_RENDERER = "renderer"
ROLE_CONTROLLER = "controller"
ROLES = {ROLE_RENDERER, ROLE_CONTROLLER}

SEATS = ("p1", "p2")

# "cvc" is the renderer's idle attract mode; controllers only ever pick pvc/pvp.
MODES = {"cvc", "pvc", "pvp"}
CONTROLLER_MODES = {"pvc", "pvp"}
DEFAULT_MODE = "cvc"

DEFAULT_ROOM = "baden"

# Controller message types mirrored into the audit log.
AUDITED_CONTROLLER_TYPES = {"mode", "start", "ready", "claim"}

COUNTDOWN_SECONDS = 3

# Newest entries rendered on the HTML log page.
LOG_PAGE_ROWS = 500

__all__ = [
    "ROLE_RENDERER",
    "ROLE_CONTROLLER",
    "ROLES",
    "SEATS",
    "MODES",
    "CONTROLLER_MODES",
    "DEFAULT_MODE",
    "DEFAULT_ROOM",
    "AUDITED_CONTROLLER_TYPES",
    "COUNTDOWN_SECONDS",
    "LOG_PAGE_ROWS",
]
