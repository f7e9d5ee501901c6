"""
Tool definitions for function calling
"""

from typing import Any, Dict, Optional

from .models import Function, FunctionName, Tool, ToolChoiceObject


def function_tool(
    name: str,
    parameters: Dict[str, Any],
    description: Optional[str] = None,
    strict: Optional[bool] = None,
) -> Tool:
    """
    Describe a function the model may call.

    Args:
        name: Function name the model will refer to
        parameters: JSON Schema of the arguments object
        description: What the function does, shown to the model
        strict: Ask the API to enforce the schema on generated arguments
    """
    return Tool(function=Function(name=name, description=description, parameters=parameters, strict=strict))


def tool_choice_function(name: str) -> ToolChoiceObject:
    """Tool choice forcing a call to the named function"""
    return ToolChoiceObject(function=FunctionName(name=name))
