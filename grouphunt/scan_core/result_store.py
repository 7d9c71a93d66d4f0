"""Result Store - Deduplicating, sorted on-disk accumulator of hits

The store keeps one line per group id in a flat text file::

    Group 1234 has 500 robux.
    Group 42 has 50 robux.

Every ``record`` call rereads the file, merges the new pair, sorts by
balance (descending, ties by ascending id) and replaces the whole file.
Writers are serialized by a single lock owned by the store instance, so
the instance must be shared by every worker writing to the same file.
"""

import asyncio
import logging
import re
from pathlib import Path
from typing import Dict, Iterable, List, Tuple, Union

import aiofiles
import aiofiles.os

from .constants import RESULT_LINE_PATTERN, RESULTS_FILE
from .exceptions import PersistenceError
from .models import format_result_line

logger = logging.getLogger(__name__)

RESULT_LINE_REGEX = re.compile(RESULT_LINE_PATTERN)


# ===============================================================================
# PARSING / RENDERING
# ===============================================================================

def parse_result_lines(lines: Iterable[str]) -> Dict[int, int]:
    """Parse result lines into an id -> balance mapping.

    Lines that do not match the grammar are dropped.
    """
    balances: Dict[int, int] = {}
    for line in lines:
        match = RESULT_LINE_REGEX.match(line.strip())
        if match:
            balances[int(match.group(1))] = int(match.group(2))
    return balances


def sort_balances(balances: Dict[int, int]) -> List[Tuple[int, int]]:
    """Sort by balance descending, then id ascending"""
    return sorted(balances.items(), key=lambda item: (-item[1], item[0]))


def render_result_lines(entries: Iterable[Tuple[int, int]]) -> str:
    return "\n".join(format_result_line(group_id, balance) for group_id, balance in entries)


# ===============================================================================
# RESULT STORE
# ===============================================================================

class ResultStore:
    """Crash-tolerant accumulator of discovered hits"""

    def __init__(self, path: Union[str, Path] = RESULTS_FILE):
        self.path = Path(path)
        self._permit = asyncio.Lock()
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @property
    def temp_path(self) -> Path:
        return self.path.with_name(f".{self.path.name}.tmp")

    async def record(self, group_id: int, balance: int) -> List[Tuple[int, int]]:
        """Insert or overwrite one hit and rewrite the file.

        Returns the sorted entries that were written. Raises
        :class:`PersistenceError` when the file cannot be written.
        """
        async with self._permit:
            balances = await self._read_existing()
            balances[int(group_id)] = int(balance)
            entries = sort_balances(balances)
            await self._replace_contents(render_result_lines(entries))
            self.logger.debug(f"Recorded group {group_id} with {balance} robux ({len(entries)} total)")
            return entries

    async def _read_existing(self) -> Dict[int, int]:
        try:
            async with aiofiles.open(self.path, 'r', encoding='utf-8') as f:
                content = await f.read()
        except FileNotFoundError:
            return {}
        except (OSError, UnicodeDecodeError) as e:
            self.logger.warning(f"Could not read {self.path}, starting fresh: {e}")
            return {}
        return parse_result_lines(content.splitlines())

    async def _replace_contents(self, content: str):
        temp_path = self.temp_path
        try:
            async with aiofiles.open(temp_path, 'w', encoding='utf-8') as f:
                await f.write(content)
            await aiofiles.os.replace(temp_path, self.path)
        except OSError as e:
            try:
                await aiofiles.os.remove(temp_path)
            except OSError:
                pass
            raise PersistenceError(f"Failed to write {self.path}: {e}") from e

    # Synchronous readers for the CLI -------------------------------------

    def load(self) -> Dict[int, int]:
        """Read the current file into an id -> balance mapping"""
        try:
            content = self.path.read_text(encoding='utf-8')
        except FileNotFoundError:
            return {}
        except (OSError, UnicodeDecodeError) as e:
            self.logger.warning(f"Could not read {self.path}: {e}")
            return {}
        return parse_result_lines(content.splitlines())

    def entries(self) -> List[Tuple[int, int]]:
        return sort_balances(self.load())

    def __len__(self) -> int:
        return len(self.load())

    def __repr__(self) -> str:
        return f"ResultStore(path='{self.path}')"

