"""
Utilities for string interpolation using environment variables.
"""
import re
from typing import Dict


class EnvironmentInterpolator:
    """
    Utility for interpolating environment variables in strings.
    Supports $VAR, ${VAR}, ${VAR:-default}, and ${VAR:+value}.
    """
    # Group 1: braced VAR name
    # Group 2: - or +
    # Group 3: default or value
    # Group 4: bare $VAR name
    PATTERN = re.compile(r'\$\{([^}:]+)(?::(-|\+)([^}]*))?\}|\$([A-Za-z_][A-Za-z0-9_]*)')

    @staticmethod
    def interpolate(template: str, context: Dict[str, str], strict: bool = False) -> str:
        """
        Interpolates environment variables in the template string using the provided context.

        :param template: The string containing $VAR or ${VAR} placeholders.
        :param context: The environment variables context.
        :param strict: Raise for unset variables instead of expanding them to ''.
        :return: The interpolated string.
        :raises KeyError: If strict and a variable is not found and no default is provided.
        """
        def replace(match):
            var_name = match.group(1) or match.group(4)
            modifier = match.group(2)
            alt_value = match.group(3)

            value = context.get(var_name)

            if modifier == '-':
                return value if value else alt_value
            elif modifier == '+':
                return alt_value if value else ''
            if value is not None:
                return value
            if strict:
                raise KeyError(f"Variable {var_name} not found in context")
            return ''

        return EnvironmentInterpolator.PATTERN.sub(replace, template)
