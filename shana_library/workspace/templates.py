"""Jinja2 templates for workspace files.

Rendering is pure: a RunContext goes in, file contents come out.
"""

import json
import re

from jinja2 import Environment
from jinja2 import PackageLoader
from jinja2 import StrictUndefined

from ..errors import ConfigurationError
from ..models import ModuleVersion

# Server protocol -> template of the generated main.go
SERVER_PROTOCOLS = {
    "httpjson": "httpjson/main.go.j2",
}

GO_MOD_TEMPLATE = "go.mod.j2"
GO_WORK_TEMPLATE = "go.work.j2"

_BARE_TOKEN_RE = re.compile(r"^[^\s\"'`()]+$")


def gopath(value: object) -> str:
    """Quote a module or directory path when go.mod syntax requires it."""
    text = str(value)
    if text and _BARE_TOKEN_RE.match(text) and "//" not in text and "=>" not in text:
        return text
    return json.dumps(text)


def modversion(value: ModuleVersion) -> str:
    """Format `path [version]` as used by require and replace lines."""
    if value.version:
        return f"{gopath(value.path)} {value.version}"
    return gopath(value.path)


def create_environment() -> Environment:
    """Create the Jinja2 environment for workspace templates."""
    env = Environment(
        loader=PackageLoader("shana_library.workspace", "templates"),
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
        autoescape=False,
    )
    env.filters["gopath"] = gopath
    env.filters["modversion"] = modversion
    return env


def main_template_name(protocol: str) -> str:
    """Template of main.go for a server protocol.

    Raises:
        ConfigurationError: If the protocol is not supported
    """
    try:
        return SERVER_PROTOCOLS[protocol]
    except KeyError:
        supported = ", ".join(sorted(SERVER_PROTOCOLS))
        raise ConfigurationError(f"unsupported server-proto '{protocol}' (supported: {supported})") from None
