from knot.models.group import Group
from knot.models.api import Api, ApiType, HttpMethod
from knot.models.parameter import Parameter, ParameterType, ParamDirection

__all__ = [
    "Group",
    "Api",
    "ApiType",
    "HttpMethod",
    "Parameter",
    "ParameterType",
    "ParamDirection",
]
