"""
Command Parser — turns a free-text assistant reply into typed commands.

The assistant embeds pseudo-function calls in its prose:

    initializeDraft("FPV Drone", "5 inch freestyle")
    addPart("drone-mot-xing2", 4)
    removePart('a1b2c3d4e')

Each call shape is declared once as a ``CallSignature`` (name + typed
parameters). Signatures compile to a single regex each; arguments accept
double, single or no quotes, and the call may end with a ``;``.

Every matched call is converted to a command in first-seen order and cut out
of the text. What remains is the ``reasoning`` shown to the user, after the
scaffolding the assistant tends to wrap calls in (tool-call headings, code
fences, JSON arrays) has been scrubbed.

Parsing never raises: malformed calls simply do not match and stay in the
reasoning text.
"""
import logging
import re
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from buildsheet import config
from buildsheet.models.commands import AddPart, InitDraft, ParsedReply, RemovePart

logger = logging.getLogger("buildsheet-parser")

# ── Argument tokens ──────────────────────────────────────────────────────────
_STR_TOKEN = r'"[^"\n]*"|\'[^\'\n]*\'|[^"\',\s()]+'
_INT_TOKEN = r'"\d+"|\'\d+\'|\d+'


@dataclass(frozen=True)
class Param:
    name: str
    kind: str = "str"          # str | int
    optional: bool = False


@dataclass
class CallSignature:
    """One call shape of the command grammar."""
    name: str
    params: Tuple[Param, ...]
    build: Callable[[Dict[str, object]], object]
    repeatable: bool = True
    pattern: re.Pattern = field(init=False, repr=False)

    def __post_init__(self):
        self.pattern = re.compile(self._compile())

    def _compile(self) -> str:
        parts = []
        for i, p in enumerate(self.params):
            token = _INT_TOKEN if p.kind == "int" else _STR_TOKEN
            group = rf"(?P<{p.name}>{token})"
            if i == 0:
                piece = rf"\s*{group}"
            else:
                piece = rf"\s*,\s*{group}"
            if p.optional:
                piece = rf"(?:{piece})?"
            parts.append(piece)
        return rf"\b{re.escape(self.name)}\s*\({''.join(parts)}\s*\)[ \t]*;?"

    def convert(self, match: re.Match) -> object:
        values: Dict[str, object] = {}
        for p in self.params:
            raw = match.group(p.name)
            if raw is None:
                continue
            value = _unquote(raw)
            values[p.name] = int(value) if p.kind == "int" else value
        return self.build(values)


def _unquote(token: str) -> str:
    if len(token) >= 2 and token[0] == token[-1] and token[0] in "\"'":
        return token[1:-1]
    return token


GRAMMAR: Tuple[CallSignature, ...] = (
    CallSignature(
        "initializeDraft",
        (Param("name"), Param("requirements", optional=True)),
        lambda v: InitDraft(name=v["name"], requirements=v.get("requirements", "")),
        repeatable=False,
    ),
    CallSignature(
        "addPart",
        (Param("part_id"), Param("qty", kind="int", optional=True)),
        lambda v: AddPart(part_id=v["part_id"], qty=v.get("qty", 1)),
    ),
    CallSignature(
        "removePart",
        (Param("instance_id"),),
        lambda v: RemovePart(instance_id=v["instance_id"]),
    ),
)

_KEYWORDS = "|".join(re.escape(sig.name) for sig in GRAMMAR)

# ── Residue left behind once the calls are cut out ───────────────────────────
_CLEANUP: Tuple[Tuple[re.Pattern, str], ...] = (
    # "### Tool Calls:" / "**Tool calls**" / "Tool_Code:" headings
    (re.compile(r"^[ \t]*(?:#{1,6}[ \t]*)?\**[ \t]*tool[ _-]?(?:calls?|code|commands?)\**[ \t]*:?\**[ \t]*$",
                re.IGNORECASE | re.MULTILINE), ""),
    # comment lines left between calls; runs before the fence rules
    (re.compile(r"^[ \t]*//.*$", re.MULTILINE), ""),
    (re.compile(r"^[ \t]*;[ \t]*$", re.MULTILINE), ""),
    # fenced blocks that are now empty or still mention a command keyword
    (re.compile(r"```[\w-]*[ \t]*\n(?:[ \t]*\n)*```", re.MULTILINE), ""),
    (re.compile(rf"```[^\n]*\n(?:(?!```).)*?(?:{_KEYWORDS})(?:(?!```).)*?```", re.DOTALL), ""),
    # "tool": [...] / tool_calls = [...]
    (re.compile(r'^[ \t]*"?tool[\w]*"?[ \t]*[:=][ \t]*\[[^\]]*\][ \t,]*$', re.IGNORECASE | re.MULTILINE), ""),
    (re.compile(r"[ \t]+$", re.MULTILINE), ""),
    (re.compile(r"\n{3,}"), "\n\n"),
)


class CommandParser:
    def __init__(self, grammar: Tuple[CallSignature, ...] = GRAMMAR):
        self.grammar = grammar

    def _find_calls(self, text: str) -> List[Tuple[int, int, CallSignature, re.Match, bool]]:
        hits = []
        for sig in self.grammar:
            for m in sig.pattern.finditer(text):
                hits.append((m.start(), m.end(), sig, m))
        hits.sort(key=lambda h: (h[0], -h[1]))

        accepted = []
        seen_single = set()
        last_end = -1
        for start, end, sig, m in hits:
            if start < last_end:
                continue
            # a repeated single-use call is cut from the text but never applied
            applied = sig.repeatable or sig.name not in seen_single
            seen_single.add(sig.name)
            accepted.append((start, end, sig, m, applied))
            last_end = end
        return accepted

    def parse(self, text: Optional[str]) -> ParsedReply:
        if not text or not text.strip():
            return ParsedReply(reasoning=config.FALLBACK_REASONING, commands=[])

        try:
            calls = self._find_calls(text)
        except Exception as e:
            logger.warning(f"Command scan failed ({type(e).__name__}: {e}) — treating reply as prose")
            return ParsedReply(reasoning=text, commands=[])

        if not calls:
            return ParsedReply(reasoning=text, commands=[])

        commands = []
        pieces = []
        cursor = 0
        for start, end, sig, m, applied in calls:
            if not applied:
                logger.debug(f"Ignoring repeated {sig.name} call: {m.group(0)!r}")
                pieces.append(text[cursor:start])
                cursor = end
                continue
            try:
                commands.append(sig.convert(m))
            except Exception as e:
                # Leave the call text in place; it never became a command
                logger.warning(f"Could not convert {m.group(0)!r}: {e}")
                continue
            pieces.append(text[cursor:start])
            cursor = end
        pieces.append(text[cursor:])

        reasoning = "".join(pieces)
        for pattern, replacement in _CLEANUP:
            reasoning = pattern.sub(replacement, reasoning)
        reasoning = reasoning.strip()

        logger.debug(f"Parsed {len(commands)} command(s) from {len(text)} chars")
        return ParsedReply(reasoning=reasoning, commands=commands)


_default_parser = CommandParser()


def parse(text: Optional[str]) -> ParsedReply:
    return _default_parser.parse(text)
