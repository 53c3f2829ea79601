"""
Field level comparison of two struct signatures.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from ..domain import Field, FieldChange, FieldSignature


def _key(field: Field, index: int) -> str:
    return field.name if field.name is not None else str(index)


def diff_fields(older: Optional[FieldSignature], newer: FieldSignature) -> List[FieldChange]:
    """
    Describe how the fields of `older` became the fields of `newer`.

    Named fields are matched by name and tuple fields by position. A
    single removal paired with a single addition at the same position
    and with the same type is reported as a rename. With no `older`
    signature every field counts as added.
    """

    old_fields = list(older.fields) if older is not None else []
    new_fields = list(newer.fields)

    old_by_key: Dict[str, Field] = {_key(f, i): f for i, f in enumerate(old_fields)}
    new_by_key: Dict[str, Field] = {_key(f, i): f for i, f in enumerate(new_fields)}

    changes: List[FieldChange] = []
    removed = [key for key in old_by_key if key not in new_by_key]
    added = [key for key in new_by_key if key not in old_by_key]

    if len(removed) == 1 and len(added) == 1:
        old_field = old_by_key[removed[0]]
        new_field = new_by_key[added[0]]
        same_slot = old_fields.index(old_field) == new_fields.index(new_field)
        if same_slot and old_field.ty == new_field.ty:
            changes.append(
                FieldChange(
                    kind="renamed",
                    name=added[0],
                    ty=new_field.ty,
                    old_name=removed[0],
                    old_ty=old_field.ty,
                )
            )
            removed, added = [], []

    for key in removed:
        changes.append(FieldChange(kind="removed", name=key, ty=old_by_key[key].ty))

    for key, new_field in new_by_key.items():
        old_field = old_by_key.get(key)
        if old_field is not None and old_field.ty != new_field.ty:
            changes.append(
                FieldChange(kind="retyped", name=key, ty=new_field.ty, old_ty=old_field.ty)
            )

    for key in added:
        changes.append(FieldChange(kind="added", name=key, ty=new_by_key[key].ty))

    return changes
