import colorlog

ROOT_LOGGER = "winlib"

handler = colorlog.StreamHandler()
handler.setFormatter(
    colorlog.ColoredFormatter(
        "%(log_color)s%(levelname)s:%(name)s:%(message)s"
    )
)

_root = colorlog.getLogger(ROOT_LOGGER)
_root.addHandler(handler)
_root.propagate = False


def get_logger(name):
    """Return a logger below the colorlog-handled package logger."""
    if name != ROOT_LOGGER and not name.startswith(ROOT_LOGGER + "."):
        name = f"{ROOT_LOGGER}.{name}"
    return colorlog.getLogger(name)


def set_level(level) -> None:
    """Set the level for every winlib logger."""
    _root.setLevel(level)
