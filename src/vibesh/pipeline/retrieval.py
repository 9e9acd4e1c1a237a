"""Knowledge base of known intents and the lexical matcher over it.

A query word counts for an entry when it is a substring of the entry's
intent phrase. There are no embeddings and no ranking beyond the raw
counts.
"""

from collections.abc import Iterator, Mapping
from types import MappingProxyType

from vibesh.logging import Loggers
from vibesh.pipeline.models import KnowledgeEntry

logger = Loggers.pipeline()

DEFAULT_KNOWLEDGE: dict[str, str] = {
    # General file system commands
    "list files": "ls -la",
    "show hidden files": "ls -la | grep '^\\.'",
    "find file": "find . -name",
    "find text in files": "grep -r 'text' .",
    "create directory": "mkdir -p",
    "remove directory": "rm -rf",
    "copy file": "cp",
    "move file": "mv",
    "change permissions": "chmod",
    "change owner": "chown",
    # System information
    "show disk space": "df -h",
    "check memory": "free -m || vm_stat",
    "show running processes": "ps aux",
    "show system info": "uname -a",
    "find large files": "find . -type f -size +100M",
    "check network connections": "netstat -tuln || lsof -i -P -n",
    "show ip address": "ifconfig || ip addr",
    "monitor cpu usage": "top",
    "check system logs": "tail -f /var/log/syslog || tail -f /var/log/system.log",
    # macOS
    "show mac info": "system_profiler SPHardwareDataType",
    "list applications": "ls -la /Applications",
    "show mac version": "sw_vers",
    "flush dns": "dscacheutil -flushcache; killall -HUP mDNSResponder",
    "show network info": "networksetup -listallhardwareports",
    "show battery info": "pmset -g batt",
    # Development
    "list ports": "lsof -i -P -n | grep LISTEN",
    "kill process on port": "lsof -ti tcp:PORT | xargs kill",
    "check git status": "git status",
    "git pull": "git pull",
    "git push": "git push",
    "list docker containers": "docker ps",
    "build docker image": "docker build -t NAME .",
    "run docker container": "docker run -it --rm NAME",
    "go build": "go build",
    "go test": "go test ./...",
    "go run": "go run main.go",
    "npm install": "npm install",
    "npm start": "npm start",
    "view json pretty": "cat FILE | jq",
}

POPULAR_INTENTS: dict[str, str] = {
    "list files": "List files in the current directory",
    "find file": "Find a file by name",
    "find text in files": "Search for text in files",
    "show disk space": "Show disk usage",
    "check git status": "Check git repository status",
    "list ports": "List open network ports",
    "show system info": "Display system information",
}


class KnowledgeBase(Mapping[str, KnowledgeEntry]):
    """Immutable intent-to-template mapping.

    Entries are fixed at construction and iterate in lexicographic order
    of intent phrase, which makes tie-breaking in the matcher
    deterministic.
    """

    def __init__(self, templates: Mapping[str, str] | None = None):
        source = DEFAULT_KNOWLEDGE if templates is None else templates
        entries = {
            intent: KnowledgeEntry(intent=intent, template=template)
            for intent, template in sorted(source.items())
        }
        self._entries = MappingProxyType(entries)

    def __getitem__(self, intent: str) -> KnowledgeEntry:
        return self._entries[intent]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def entries(self) -> list[KnowledgeEntry]:
        """All entries in lexicographic intent order."""
        return list(self._entries.values())


class RetrievalMatcher:
    """Matches free text against the knowledge base.

    Example:
        matcher = RetrievalMatcher(KnowledgeBase({"list files": "ls -la"}))
        entry = matcher.match("please list my files")
        assert entry is not None and entry.template == "ls -la"
    """

    def __init__(self, knowledge_base: KnowledgeBase | None = None):
        self.knowledge_base = knowledge_base if knowledge_base is not None else KnowledgeBase()

    @staticmethod
    def score(query_words: list[str], intent: str) -> int:
        """Count query words contained in an intent phrase."""
        haystack = intent.lower()
        return sum(1 for word in query_words if word in haystack)

    def match(self, query: str) -> KnowledgeEntry | None:
        """Find the best matching entry.

        Args:
            query: Free-text user input

        Returns:
            The entry with the strictly highest count (first in intent
            order on ties), or None when no entry scores above zero
        """
        words = query.lower().split()
        best: KnowledgeEntry | None = None
        best_count = 0

        for entry in self.knowledge_base.entries():
            count = self.score(words, entry.intent)
            if count > best_count:
                best = entry
                best_count = count

        if best is not None:
            logger.debug("retrieval_match", intent=best.intent, count=best_count)
        return best
