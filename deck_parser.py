"""
Deck list parsing utilities for Magic: The Gathering.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional, Tuple

_LOG = logging.getLogger(__name__)

MAINBOARD = "mainboard"
SIDEBOARD = "sideboard"


@dataclass
class DecklistSpec:
    """Card names and quantities per section, before any card lookup."""
    sections: Dict[str, Dict[str, int]] = field(
        default_factory=lambda: {MAINBOARD: {}, SIDEBOARD: {}}
    )
    set_codes: Dict[str, str] = field(default_factory=dict)
    name: Optional[str] = None

    @property
    def mainboard(self) -> Dict[str, int]:
        return self.sections[MAINBOARD]

    @property
    def sideboard(self) -> Dict[str, int]:
        return self.sections[SIDEBOARD]

    def add(self, section: str, card_name: str, quantity: int) -> None:
        cards = self.sections.setdefault(section, {})
        cards[card_name] = cards.get(card_name, 0) + quantity

    def is_empty(self) -> bool:
        return not any(self.sections.values())


class DeckParser:
    """Parser for various Magic: The Gathering decklist formats."""

    def __init__(self):
        self.patterns = [
            # "1 Card Name (SET) 123 *F*" - full format with set and collector number
            re.compile(r'^(\d+)x?\s+(.+?)\s+\(([A-Z0-9]+)\)\s+\S+(?:\s+\*[A-Z]*\*)?$', re.IGNORECASE),
            # "1 Card Name (SET)"
            re.compile(r'^(\d+)x?\s+(.+?)\s+\(([A-Z0-9]+)\)$', re.IGNORECASE),
            # "1 Card Name" or "1x Card Name"
            re.compile(r'^(\d+)x?\s+(.+)$', re.IGNORECASE),
            # "Card Name" (quantity 1)
            re.compile(r'^(\D.*)$'),
        ]

        self.ignore_patterns = [
            re.compile(r'^\s*$'),
            re.compile(r'^\s*#'),
            re.compile(r'^\s*//'),
        ]

        # Section headers; anything not listed here goes to the mainboard
        self.section_headers = {
            SIDEBOARD: re.compile(r'^(sideboard|side board|sb):?$', re.IGNORECASE),
            MAINBOARD: re.compile(r'^(deck|main|mainboard|main deck|commanders?):?$', re.IGNORECASE),
        }
        self.skip_section = re.compile(r'^(maybeboard|considering):?$', re.IGNORECASE)

    def parse_text(self, text: str, name: Optional[str] = None) -> DecklistSpec:
        """
        Parse decklist text.

        Args:
            text: Decklist contents, one card per line
            name: Optional deck name

        Returns:
            DecklistSpec with mainboard and sideboard quantities

        Raises:
            ValueError: If no card lines are found
        """
        decklist = DecklistSpec(name=name)
        section: Optional[str] = MAINBOARD

        for line_num, raw_line in enumerate(text.splitlines(), 1):
            line = raw_line.strip()

            if self._should_ignore_line(line):
                continue

            header = self._section_header(line)
            if header is not None:
                section = header or None
                continue
            if section is None:
                continue

            parsed = self._parse_line(line)
            if parsed is None:
                _LOG.debug("Skipping unparseable line %d: %r", line_num, line)
                continue

            quantity, card_name, set_code = parsed
            if set_code:
                decklist.set_codes[card_name] = set_code
            decklist.add(section, card_name, quantity)

        if decklist.is_empty():
            raise ValueError(f"No valid cards found in {name or 'decklist'}")

        return decklist

    def parse_file(self, file_path: str) -> DecklistSpec:
        """
        Parse a decklist file.

        Args:
            file_path: Path to the decklist file

        Returns:
            DecklistSpec named after the file

        Raises:
            FileNotFoundError: If the file doesn't exist
            ValueError: If the file has no card lines
        """
        path = Path(file_path)
        if not path.exists():
            raise FileNotFoundError(f"Decklist file not found: {file_path}")

        deck_name = path.stem.replace('_', ' ').replace('-', ' ').title()

        try:
            text = path.read_text(encoding='utf-8')
        except UnicodeDecodeError:
            text = path.read_text(encoding='latin-1')

        return self.parse_text(text, name=deck_name)

    def _should_ignore_line(self, line: str) -> bool:
        return any(pattern.match(line) for pattern in self.ignore_patterns)

    def _section_header(self, line: str) -> Optional[str]:
        """Section name for a header line, "" for a skipped section, None for a card line."""
        for section, pattern in self.section_headers.items():
            if pattern.match(line):
                return section
        if self.skip_section.match(line):
            return ""
        return None

    def _parse_line(self, line: str) -> Optional[Tuple[int, str, Optional[str]]]:
        """
        Parse a single line of a decklist.

        Returns:
            (quantity, card_name, set_code or None), or None if parsing failed
        """
        for pattern in self.patterns[:2]:
            match = pattern.match(line)
            if match:
                return int(match.group(1)), self._clean_card_name(match.group(2)), match.group(3).upper()

        match = self.patterns[2].match(line)
        if match:
            return int(match.group(1)), self._clean_card_name(match.group(2)), None

        match = self.patterns[3].match(line)
        if match:
            card_name = self._clean_card_name(match.group(1))
            # Skip very short names (likely parsing errors)
            if len(card_name) >= 2:
                return 1, card_name, None

        return None

    def _clean_card_name(self, name: str) -> str:
        return re.sub(r'\s+', ' ', name).strip()


def parse_decklist(file_path: str) -> DecklistSpec:
    """
    Convenience function to parse a decklist file.

    Args:
        file_path: Path to the decklist file

    Returns:
        DecklistSpec
    """
    return DeckParser().parse_file(file_path)
