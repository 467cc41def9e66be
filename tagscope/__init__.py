from tagscope.tagscope_datatypes import (
    ABSENT, Dot, TagPath, Segment, StringLiteral, NumberLiteral, ArrayLiteral,
    TagscopeError, PathSyntaxError, ParameterSyntaxError, EmptyContextError,
    ResolutionDepthError, TemplateSyntaxError
)
from tagscope.tagscope_params import split_params
from tagscope.tagscope_parser import parse_path
from tagscope.tagscope_frames import ScopeRecord
from tagscope.tagscope_context import Context, DEFAULT_MAX_DEPTH
from tagscope.tagscope_renderer import Renderer, LambdaHelper

__all__ = [
    "ABSENT", "Dot", "TagPath", "Segment", "StringLiteral", "NumberLiteral", "ArrayLiteral",
    "TagscopeError", "PathSyntaxError", "ParameterSyntaxError", "EmptyContextError",
    "ResolutionDepthError", "TemplateSyntaxError",
    "split_params", "parse_path", "ScopeRecord",
    "Context", "DEFAULT_MAX_DEPTH", "Renderer", "LambdaHelper",
]
