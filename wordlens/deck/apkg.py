"""Offline flashcard bridge writing an Anki package (.apkg) with genanki."""

import base64
import binascii
import hashlib
import logging
import os
from datetime import datetime
from typing import Dict, List, Optional, Sequence

import genanki

from ..config import Config
from ..errors import IntegrationError
from ..utils import ensure_dir
from .bridge import FlashcardBridge

logger = logging.getLogger(__name__)

BASIC_MODEL = "Basic"
BASIC_FIELDS = ["Front", "Back"]


def _stable_id(*parts: str) -> int:
    """Deterministic 31-bit id (Python's hash() varies between sessions)."""
    digest = hashlib.md5("|".join(parts).encode("utf-8")).hexdigest()
    return int(digest[:8], 16) % (1 << 31)


class ApkgBridge(FlashcardBridge):
    """
    Collects notes in memory and writes one .apkg on write().

    Models are created on first use from the field names of the first note
    that references them, so any field mapping can be exported.
    """

    def __init__(self, output_file: Optional[str] = None, media_dir: Optional[str] = None):
        self.output_file = output_file or os.path.join(Config.OUTPUT_DIR, "wordlens.apkg")
        self.media_dir = media_dir or os.path.join(Config.OUTPUT_DIR, "media")
        self.decks: Dict[str, genanki.Deck] = {}
        self.models: Dict[str, genanki.Model] = {}
        self.media_files: List[str] = []
        self._note_count = 0

    async def test_connection(self) -> bool:
        return True

    async def get_deck_names(self) -> List[str]:
        return list(self.decks)

    async def create_deck(self, deck_name: str) -> None:
        if deck_name not in self.decks:
            self.decks[deck_name] = genanki.Deck(_stable_id("deck", deck_name), deck_name)

    def _model_for(self, model_name: str, field_names: List[str]) -> genanki.Model:
        model = self.models.get(model_name)
        if model is None:
            front, back = field_names[0], field_names[1:]
            answer = "{{FrontSide}}<hr id=answer>" + "<br>".join("{{%s}}" % name for name in back)
            model = genanki.Model(
                _stable_id("model", model_name, *field_names),
                model_name,
                fields=[{"name": name} for name in field_names],
                templates=[{"name": "Card 1", "qfmt": "{{%s}}" % front, "afmt": answer}],
            )
            self.models[model_name] = model
        return model

    async def add_note(self, deck_name, model_name, fields, tags):
        if deck_name not in self.decks:
            raise IntegrationError(f"Deck {deck_name!r} does not exist")
        if not fields:
            raise IntegrationError("Cannot add a note without fields")

        if model_name == BASIC_MODEL and set(fields) <= set(BASIC_FIELDS):
            field_names = list(BASIC_FIELDS)
        else:
            field_names = list(fields)
        model = self._model_for(model_name, field_names)
        model_fields = [f["name"] for f in model.fields]
        unknown = set(fields) - set(model_fields)
        if unknown:
            raise IntegrationError(f"Model {model_name!r} has no field(s) {sorted(unknown)}")

        note = genanki.Note(
            model=model,
            fields=[fields.get(name, "") for name in model_fields],
            tags=[tag.replace(" ", "_") for tag in tags],
        )
        self.decks[deck_name].add_note(note)
        self._note_count += 1
        return self._note_count

    async def store_media_file(self, filename, data):
        try:
            content = base64.b64decode(data, validate=True)
        except (binascii.Error, ValueError) as e:
            raise IntegrationError(f"Media file {filename!r} is not valid base64") from e

        ensure_dir(self.media_dir)
        path = os.path.join(self.media_dir, filename)
        with open(path, "wb") as f:
            f.write(content)
        if path not in self.media_files:
            self.media_files.append(path)

    async def get_model_names(self) -> List[str]:
        names = list(self.models)
        if BASIC_MODEL not in names:
            names.insert(0, BASIC_MODEL)
        return names

    async def get_model_field_names(self, model_name: str) -> List[str]:
        model = self.models.get(model_name)
        if model is not None:
            return [f["name"] for f in model.fields]
        return list(BASIC_FIELDS) if model_name == BASIC_MODEL else []

    def write(self, output_file: Optional[str] = None) -> str:
        """
        Write every collected deck into one package.

        An existing package is kept as a timestamped backup.

        Returns:
            Path of the written file
        """
        output_file = output_file or self.output_file
        if not self.decks:
            raise IntegrationError("Nothing to export: no decks were created")

        ensure_dir(os.path.dirname(os.path.abspath(output_file)))
        if os.path.exists(output_file):
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            backup_file = output_file.replace(".apkg", f"_{timestamp}.apkg")
            os.rename(output_file, backup_file)
            logger.info("Backup created: %s", backup_file)

        package = genanki.Package(list(self.decks.values()))
        package.media_files = [f for f in self.media_files if os.path.exists(f)]
        package.write_to_file(output_file)

        logger.info("Wrote %d note(s) in %d deck(s) to %s", self._note_count, len(self.decks), output_file)
        return output_file
