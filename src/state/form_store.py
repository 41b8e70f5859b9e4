"""
Form-draft store: per-form field state, user preferences and saved drafts

Preferences and drafts are persisted under the "form-store" key; per-form
field state lives only for the session.
"""

import uuid
from dataclasses import dataclass, field, fields, replace
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from models.enums import PostVisibility
from models.validation import ValidationResult
from state.storage import LocalStorage
from state.store import Store
from utils.helpers import parse_timestamp, utc_now

STORAGE_KEY = "form-store"
DRAFT_FIELDS = ("title", "body", "author")


def _new_draft_id() -> str:
    return uuid.uuid4().hex[:9]


@dataclass(frozen=True)
class FormState:
    data: Dict[str, Any] = field(default_factory=dict)
    errors: Dict[str, str] = field(default_factory=dict)
    touched: Dict[str, bool] = field(default_factory=dict)
    is_valid: bool = False
    is_submitting: bool = False


@dataclass(frozen=True)
class Preferences:
    auto_save: bool = True
    show_validation_on_blur: bool = True
    show_character_count: bool = True
    default_post_visibility: PostVisibility = PostVisibility.PUBLIC


@dataclass(frozen=True)
class Draft:
    id: str
    title: str
    body: str
    author: str
    last_modified: datetime


@dataclass(frozen=True)
class FormStoreState:
    forms: Dict[str, FormState] = field(default_factory=dict)
    preferences: Preferences = field(default_factory=Preferences)
    drafts: Tuple[Draft, ...] = ()

    def form(self, form_key: str) -> FormState:
        return self.forms.get(form_key, FormState())

    def draft(self, draft_id: str) -> Optional[Draft]:
        return next((d for d in self.drafts if d.id == draft_id), None)


# Actions

@dataclass(frozen=True)
class SetFormData:
    form_key: str
    field: str
    value: Any


@dataclass(frozen=True)
class SetFormErrors:
    form_key: str
    errors: Dict[str, str]


@dataclass(frozen=True)
class SetFieldError:
    form_key: str
    field: str
    error: str


@dataclass(frozen=True)
class SetFieldTouched:
    form_key: str
    field: str
    touched: bool = True


@dataclass(frozen=True)
class SetFormValid:
    form_key: str
    is_valid: bool


@dataclass(frozen=True)
class SetFormSubmitting:
    form_key: str
    is_submitting: bool


@dataclass(frozen=True)
class ResetForm:
    form_key: str


@dataclass(frozen=True)
class ApplyValidation:
    """Copy a ValidationResult's field errors and validity into a form"""
    form_key: str
    result: ValidationResult


@dataclass(frozen=True)
class SetPreference:
    key: str
    value: Any


@dataclass(frozen=True)
class SaveDraft:
    title: str
    body: str
    author: str
    id: str = field(default_factory=_new_draft_id)
    last_modified: datetime = field(default_factory=utc_now)


@dataclass(frozen=True)
class UpdateDraft:
    id: str
    updates: Dict[str, str]
    last_modified: datetime = field(default_factory=utc_now)


@dataclass(frozen=True)
class DeleteDraft:
    id: str


@dataclass(frozen=True)
class ClearDrafts:
    pass


PREFERENCE_KEYS = {f.name for f in fields(Preferences)}


def _with_form(state: FormStoreState, form_key: str, **changes) -> FormStoreState:
    form = replace(state.form(form_key), **changes)
    return replace(state, forms={**state.forms, form_key: form})


def reduce_form(state: FormStoreState, action: Any) -> FormStoreState:
    """Pure reducer: returns a new FormStoreState for ``action``"""
    if isinstance(action, SetFormData):
        form = state.form(action.form_key)
        return _with_form(state, action.form_key, data={**form.data, action.field: action.value})

    if isinstance(action, SetFormErrors):
        return _with_form(state, action.form_key, errors=dict(action.errors))

    if isinstance(action, SetFieldError):
        form = state.form(action.form_key)
        return _with_form(state, action.form_key, errors={**form.errors, action.field: action.error})

    if isinstance(action, SetFieldTouched):
        form = state.form(action.form_key)
        return _with_form(state, action.form_key, touched={**form.touched, action.field: action.touched})

    if isinstance(action, SetFormValid):
        return _with_form(state, action.form_key, is_valid=action.is_valid)

    if isinstance(action, SetFormSubmitting):
        return _with_form(state, action.form_key, is_submitting=action.is_submitting)

    if isinstance(action, ResetForm):
        return replace(state, forms={**state.forms, action.form_key: FormState()})

    if isinstance(action, ApplyValidation):
        return _with_form(
            state,
            action.form_key,
            errors=action.result.error_map(),
            is_valid=action.result.success,
        )

    if isinstance(action, SetPreference):
        if action.key not in PREFERENCE_KEYS:
            raise ValueError(f"Unknown preference: {action.key}")
        value = action.value
        if action.key == "default_post_visibility":
            value = PostVisibility(value)
        return replace(state, preferences=replace(state.preferences, **{action.key: value}))

    if isinstance(action, SaveDraft):
        draft = Draft(
            id=action.id,
            title=action.title,
            body=action.body,
            author=action.author,
            last_modified=action.last_modified,
        )
        return replace(state, drafts=state.drafts + (draft,))

    if isinstance(action, UpdateDraft):
        updates = {key: value for key, value in action.updates.items() if key in DRAFT_FIELDS}
        return replace(state, drafts=tuple(
            replace(draft, **updates, last_modified=action.last_modified) if draft.id == action.id else draft
            for draft in state.drafts
        ))

    if isinstance(action, DeleteDraft):
        return replace(state, drafts=tuple(d for d in state.drafts if d.id != action.id))

    if isinstance(action, ClearDrafts):
        return replace(state, drafts=())

    raise ValueError(f"Unknown form action: {type(action).__name__}")


def serialize_form_store(state: FormStoreState) -> Dict[str, Any]:
    """Persisted subset: preferences and drafts"""
    prefs = state.preferences
    return {
        "preferences": {
            "autoSave": prefs.auto_save,
            "showValidationOnBlur": prefs.show_validation_on_blur,
            "showCharacterCount": prefs.show_character_count,
            "defaultPostVisibility": prefs.default_post_visibility.value,
        },
        "drafts": [
            {
                "id": draft.id,
                "title": draft.title,
                "body": draft.body,
                "author": draft.author,
                "lastModified": draft.last_modified.isoformat(),
            }
            for draft in state.drafts
        ],
    }


def _deserialize_preferences(data: Any, current: Preferences) -> Preferences:
    if not isinstance(data, dict):
        return current
    changes: Dict[str, Any] = {}
    for wire_name, name in (
        ("autoSave", "auto_save"),
        ("showValidationOnBlur", "show_validation_on_blur"),
        ("showCharacterCount", "show_character_count"),
    ):
        if isinstance(data.get(wire_name), bool):
            changes[name] = data[wire_name]
    visibility = data.get("defaultPostVisibility")
    if visibility in {v.value for v in PostVisibility}:
        changes["default_post_visibility"] = PostVisibility(visibility)
    return replace(current, **changes)


def _deserialize_drafts(data: Any) -> Tuple[Draft, ...]:
    if not isinstance(data, list):
        return ()
    drafts: List[Draft] = []
    for item in data:
        if not isinstance(item, dict) or not item.get("id"):
            continue
        drafts.append(Draft(
            id=str(item["id"]),
            title=str(item.get("title") or ""),
            body=str(item.get("body") or ""),
            author=str(item.get("author") or ""),
            last_modified=parse_timestamp(item.get("lastModified")) or utc_now(),
        ))
    return tuple(drafts)


def deserialize_form_store(data: Any, state: FormStoreState) -> FormStoreState:
    """Restore preferences and drafts; unknown fields are ignored, missing ones keep defaults"""
    if not isinstance(data, dict):
        return state
    preferences = _deserialize_preferences(data.get("preferences"), state.preferences)
    drafts = _deserialize_drafts(data["drafts"]) if "drafts" in data else state.drafts
    return replace(state, preferences=preferences, drafts=drafts)


def create_form_store(storage: Optional[LocalStorage] = None) -> Store[FormStoreState]:
    """Build a form-draft store, hydrated from ``storage`` when given"""
    store = Store(
        reduce_form,
        FormStoreState(),
        storage=storage,
        storage_key=STORAGE_KEY if storage is not None else None,
        serialize=serialize_form_store,
        deserialize=deserialize_form_store,
    )
    store.hydrate()
    return store
