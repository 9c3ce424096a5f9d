from bos.platform.options.api import router
from bos.platform.options.models import Option
from bos.platform.options.schemas import OptionKey, OptionRead, OptionSet, OptionUpdate
from bos.platform.options.service import DEFAULT_OPTIONS, OptionService, option_service

__all__ = [
    "router",
    "Option",
    "OptionKey",
    "OptionRead",
    "OptionSet",
    "OptionUpdate",
    "DEFAULT_OPTIONS",
    "OptionService",
    "option_service",
]
