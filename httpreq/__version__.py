__title__ = "httpreq"
__description__ = "Single-shot HTTP requests with owned, explicitly released response bodies."
__version__ = "0.1.0"
