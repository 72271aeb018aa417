import logging

logger = logging.getLogger(__name__)
logging.basicConfig()
logging.getLogger("aiohttp").setLevel(logging.ERROR)
