"""Risk classification for retrieval-sourced commands.

Commands are matched against an ordered list of rules. A rule matches
when one of its prefixes equals the leading tokens of the command, or
when the command is one of its flag commands and carries one of its
flags, either inside a short-flag cluster (``-rfv``) or as a long
option (``--recursive``). The first matching rule wins, and rules are
ordered from most to least severe, so the first match is also the most
severe applicable tier. Commands that match no rule get the default
assessment.

Generative candidates are not classified here: the model reports its own
risk fields and those are used unchanged.
"""

from dataclasses import dataclass

from vibesh.logging import Loggers

logger = Loggers.pipeline()


@dataclass(frozen=True)
class RiskRule:
    """A tier of command prefixes sharing one assessment."""

    name: str
    prefixes: tuple[str, ...]
    score: int
    reads: bool
    writes: bool
    flag_commands: tuple[str, ...] = ()
    short_flags: str = ""
    long_flags: tuple[str, ...] = ()

    def matches(self, tokens: list[str]) -> bool:
        """Check whether any prefix or flag of this rule matches."""
        for prefix in self.prefixes:
            prefix_tokens = prefix.split()
            if tokens[: len(prefix_tokens)] == prefix_tokens:
                return True
        return self._matches_flags(tokens)

    def _matches_flags(self, tokens: list[str]) -> bool:
        if not tokens or tokens[0] not in self.flag_commands:
            return False
        for token in tokens[1:]:
            if token == "--":
                break
            if token.startswith("--"):
                if token.split("=", 1)[0] in self.long_flags:
                    return True
            elif token.startswith("-") and any(flag in self.short_flags for flag in token[1:]):
                return True
        return False


@dataclass(frozen=True)
class RiskAssessment:
    """Score and side-effect flags assigned to a command."""

    score: int
    reads: bool
    writes: bool
    rule: str


# rm counts as destructive only when recursive; plain file removal stays default
DESTRUCTIVE_RULE = RiskRule(
    name="destructive",
    prefixes=("rmdir", "shred", "mkfs"),
    score=9,
    reads=False,
    writes=True,
    flag_commands=("rm",),
    short_flags="rR",
    long_flags=("--recursive",),
)

PERMISSION_RULE = RiskRule(
    name="permission",
    prefixes=("chmod", "chown", "chgrp"),
    score=7,
    reads=False,
    writes=True,
)

TRANSFER_RULE = RiskRule(
    name="transfer",
    prefixes=("git pull", "git push", "rsync", "scp", "cp", "mv"),
    score=5,
    reads=True,
    writes=True,
)

CREATE_RULE = RiskRule(
    name="create",
    prefixes=("mkdir",),
    score=4,
    reads=False,
    writes=True,
)

INSPECTION_RULE = RiskRule(
    name="inspection",
    prefixes=(
        "ls",
        "find",
        "grep",
        "cat",
        "head",
        "tail",
        "pwd",
        "whoami",
        "git status",
        "git log",
        "git diff",
        "ps",
        "top",
        "df",
        "du",
        "free",
        "uname",
        "netstat",
        "lsof",
        "ifconfig",
        "ip addr",
        "docker ps",
        "sw_vers",
        "system_profiler",
        "pmset -g",
        "networksetup -listallhardwareports",
    ),
    score=1,
    reads=True,
    writes=False,
)

DEFAULT_RULES: tuple[RiskRule, ...] = (
    DESTRUCTIVE_RULE,
    PERMISSION_RULE,
    TRANSFER_RULE,
    CREATE_RULE,
    INSPECTION_RULE,
)

DEFAULT_ASSESSMENT = RiskAssessment(score=3, reads=True, writes=False, rule="default")


class RiskClassifier:
    """Assigns a risk score and read/write flags to shell text.

    Example:
        classifier = RiskClassifier()
        assessment = classifier.classify("rm -rf build")
        assert assessment.score == 9 and assessment.writes
    """

    def __init__(self, rules: tuple[RiskRule, ...] = DEFAULT_RULES):
        """Initialize the classifier.

        Args:
            rules: Ordered rules, evaluated first-match-wins.
        """
        self.rules = rules

    def classify(self, command: str) -> RiskAssessment:
        """Classify a command.

        Args:
            command: Raw shell text

        Returns:
            RiskAssessment from the first matching rule, or the default
        """
        assessment = self._first_match(command.split())
        logger.debug(
            "candidate_classified",
            command=command,
            score=assessment.score,
            rule=assessment.rule,
        )
        return assessment

    def _first_match(self, tokens: list[str]) -> RiskAssessment:
        if not tokens:
            return DEFAULT_ASSESSMENT
        for rule in self.rules:
            if rule.matches(tokens):
                return RiskAssessment(
                    score=rule.score,
                    reads=rule.reads,
                    writes=rule.writes,
                    rule=rule.name,
                )
        return DEFAULT_ASSESSMENT
