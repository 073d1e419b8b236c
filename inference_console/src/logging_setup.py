import logging


def setup_logging(level: str = 'INFO') -> None:
    resolved = logging.getLevelName(str(level or 'INFO').upper())
    if not isinstance(resolved, int):
        resolved = logging.INFO
    logging.basicConfig(
        level=resolved,
        format='%(asctime)s %(levelname)s %(name)s %(message)s',
    )
    logging.getLogger('httpx').setLevel(max(resolved, logging.WARNING))
