"""
État du formulaire d'édition d'un article.

Les écritures sont adressées par langue : modifier un champ en `fr` ne touche
jamais le même champ en `en`. Le widget d'édition riche garde son propre
contenu ; il est recopié dans le store avant tout changement de langue active
ou de mode d'édition (riche / HTML brut).
"""
import copy
import logging
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Protocol

from notary_admin.exceptions import ValidationError
from notary_admin.models.blog import FAQ_KEYS, LocalizedEntity
from notary_admin.services.content_model import LanguageContentModel, is_empty, normalize_faq

logger = logging.getLogger(__name__)


class EditorMode(str, Enum):
    RICH = "rich"
    HTML = "html"


class RichTextEditor(Protocol):
    def get_html(self) -> str: ...

    def set_content(self, html: str) -> None: ...


class FormStateStore:
    def __init__(
        self,
        content_model: LanguageContentModel,
        entity: Optional[LocalizedEntity] = None,
        active_locale: Optional[str] = None,
        editor: Optional[RichTextEditor] = None,
        editor_field: str = "content",
    ):
        self.content_model = content_model
        self.entity = entity if entity is not None else content_model.new_entity()
        self.active_locale = content_model.registry.validate(active_locale or content_model.base_locale)
        self.editor_mode = EditorMode.RICH
        self.editor_field = editor_field
        self._editor = editor
        if self._editor is not None:
            self._editor.set_content(self.get_locale_field(self.active_locale, editor_field) or "")

    @classmethod
    def from_row(cls, content_model: LanguageContentModel, row: Mapping[str, Any], **kwargs) -> "FormStateStore":
        return cls(content_model, content_model.expand(row), **kwargs)

    @property
    def is_new(self) -> bool:
        return self.entity.id is None

    # Lecture

    def _bundle(self, locale: str) -> Dict[str, Any]:
        self.content_model.registry.validate(locale)
        try:
            return self.entity.content[locale]
        except KeyError:
            raise ValidationError(f"Langue non éditée pour cet article : {locale}") from None

    def get_bundle(self, locale: str) -> Dict[str, Any]:
        """Copie du bundle d'une langue"""
        return copy.deepcopy(self._bundle(locale))

    def get_locale_field(self, locale: str, name: str) -> Any:
        return self._bundle(locale).get(name)

    def get_common_field(self, name: str) -> Any:
        return self.entity.common.get(name)

    # Écriture

    def set_common_field(self, name: str, value: Any) -> None:
        if name not in self.content_model.common_fields:
            raise ValidationError(f"Champ inconnu : {name}", name)
        self.entity.common[name] = value

    def set_locale_field(self, locale: str, name: str, value: Any) -> None:
        if name not in self.content_model.localized_fields:
            raise ValidationError(f"Champ non traduisible : {name}", name)
        bundle = self._bundle(locale)
        if name == "faq":
            value = normalize_faq(value)
        elif value is None:
            value = self.content_model.empty_value(name)
        bundle[name] = value
        if self._editor is not None and locale == self.active_locale and name == self.editor_field:
            self._editor.set_content(value or "")

    def _faq(self, locale: str) -> list:
        bundle = self._bundle(locale)
        if not isinstance(bundle.get("faq"), list):
            bundle["faq"] = []
        return bundle["faq"]

    def add_faq_entry(self, locale: str) -> int:
        """Ajoute une question vide en fin de liste et retourne son index"""
        faq = self._faq(locale)
        faq.append({"question": "", "answer": ""})
        return len(faq) - 1

    def remove_faq_entry(self, locale: str, index: int) -> None:
        faq = self._faq(locale)
        if not 0 <= index < len(faq):
            raise ValidationError(f"Question FAQ inexistante : {index}", "faq")
        del faq[index]

    def update_faq_entry(self, locale: str, index: int, field: str, value: str) -> None:
        if field not in FAQ_KEYS:
            raise ValidationError(f"Champ FAQ inconnu : {field}", "faq")
        faq = self._faq(locale)
        if not 0 <= index < len(faq):
            raise ValidationError(f"Question FAQ inexistante : {index}", "faq")
        faq[index][field] = "" if value is None else value

    # Éditeur riche

    def attach_editor(self, editor: Optional[RichTextEditor]) -> None:
        self._editor = editor
        if editor is not None:
            editor.set_content(self.get_locale_field(self.active_locale, self.editor_field) or "")

    def flush_editor(self) -> None:
        """Recopie le contenu du widget dans la langue active"""
        if self._editor is None or self.editor_mode != EditorMode.RICH:
            return
        self._bundle(self.active_locale)[self.editor_field] = self._editor.get_html()

    def set_active_locale(self, locale: str) -> None:
        self._bundle(locale)
        if locale == self.active_locale:
            return
        self.flush_editor()
        logger.debug(f"Active locale {self.active_locale} -> {locale}")
        self.active_locale = locale
        if self._editor is not None:
            self._editor.set_content(self.get_locale_field(locale, self.editor_field) or "")

    def set_editor_mode(self, mode: EditorMode) -> None:
        mode = EditorMode(mode)
        if mode == self.editor_mode:
            return
        self.flush_editor()
        self.editor_mode = mode
        if mode == EditorMode.RICH and self._editor is not None:
            self._editor.set_content(self.get_locale_field(self.active_locale, self.editor_field) or "")

    # Traductions

    def merge_translation(self, locale: str, translation: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Fusionne une traduction (éventuellement partielle) dans une langue.
        Seuls les champs présents dans la réponse sont modifiés.
        Retourne le bundle fusionné.
        """
        bundle = self._bundle(locale)
        for name, value in translation.items():
            if name not in self.content_model.localized_fields or is_empty(value):
                continue
            self.set_locale_field(locale, name, value)
        return copy.deepcopy(bundle)

    def to_row(self) -> Dict[str, Any]:
        self.flush_editor()
        return self.content_model.flatten(self.entity)
