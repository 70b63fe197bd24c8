"""
Pandoc invocation shared by the parser and the renderers.
"""

import json
import shutil
import subprocess

from bookmill.errors import ParserError, RenderError, Source

PANDOC = "pandoc"
MARKDOWN_FORMAT = "markdown+smart+fenced_divs+native_divs"


def check_tool(name, error_cls=RenderError):
    """Raise error_cls unless `name` is on PATH."""
    if not shutil.which(name):
        raise error_cls(f"{name} not found on PATH")


def exec_cmd(cmd, label="Command", input=None, error_cls=RenderError, source=None, cwd=None):
    """
    Run a command, returning its stdout as bytes.

    Raises error_cls with the first lines of stderr on a non-zero exit.
    """
    try:
        result = subprocess.run(cmd, input=input, capture_output=True, cwd=cwd or None)
    except FileNotFoundError:
        raise error_cls(f"{cmd[0]} not found", source)
    if result.returncode != 0:
        stderr = result.stderr.decode("utf-8", errors="replace").strip()
        details = "\n".join(f"    {line}" for line in stderr.splitlines()[:20])
        message = f"{label} failed (exit {result.returncode})"
        if details:
            message += f"\n{details}"
        raise error_cls(message, source)
    return result.stdout


def pandoc_cmd(command, to, extra_args=None, filters=None, from_format="json"):
    """Build a pandoc command line reading `from_format` and writing `to`."""
    cmd = [command, "--from", from_format, "--to", to]
    if extra_args:
        cmd.extend(extra_args)
    for f in filters or []:
        cmd.extend(["--lua-filter", f])
    return cmd


def document(api_version, blocks, meta=None):
    """Serialise blocks back into a pandoc JSON document."""
    return json.dumps(
        {"pandoc-api-version": api_version, "meta": meta or {}, "blocks": blocks}
    ).encode("utf-8")


class PandocParser:
    """
    Parses markdown into pandoc AST blocks.

    The API version of the first parsed document is remembered so that
    renderers can feed blocks back to the same pandoc.
    """

    def __init__(self, command=PANDOC, from_format=MARKDOWN_FORMAT):
        self.command = command
        self.from_format = from_format
        self._api_version = None

    def parse(self, text, filename=""):
        cmd = [self.command, "--from", self.from_format, "--to", "json"]
        label = f"parsing {filename}" if filename else "parsing markdown"
        source = Source(filename) if filename else None
        output = exec_cmd(
            cmd, label, input=text.encode("utf-8"), error_cls=ParserError, source=source
        )
        try:
            doc = json.loads(output)
        except ValueError as e:
            raise ParserError(f"pandoc returned invalid JSON: {e}", source)
        self._api_version = doc["pandoc-api-version"]
        return doc["blocks"]

    def api_version(self):
        if self._api_version is None:
            self.parse("")
        return self._api_version
