"""Static table of the Company record's file-bearing fields.

Create, update and delete all iterate ``ASSET_SLOTS``; adding a slot here is
the only change needed to make a new file field flow through every pipeline.
"""
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

BANNER_SLOT_COUNT = 10


@dataclass(frozen=True)
class AssetSlot:
    form_field: str   # multipart field name an upload arrives under
    attribute: str    # Company model attribute holding the stored reference


ASSET_SLOTS: Tuple[AssetSlot, ...] = (
    AssetSlot("logo", "logo"),
    # Uploads arrive as bannerImage0..9 and are stored as banner_image_1..10
    *(
        AssetSlot(f"bannerImage{index}", f"banner_image_{index + 1}")
        for index in range(BANNER_SLOT_COUNT)
    ),
    AssetSlot("digitalBrochure", "digital_brochure"),
    AssetSlot("testimonialsAttachment", "testimonials_attachment"),
)

_BY_FORM_FIELD = {slot.form_field: slot for slot in ASSET_SLOTS}


def all_slot_names() -> List[str]:
    """Record attribute names of every asset slot, in registry order."""
    return [slot.attribute for slot in ASSET_SLOTS]


def slot_for_form_field(form_field: str) -> Optional[AssetSlot]:
    return _BY_FORM_FIELD.get(form_field)


def is_asset_form_field(form_field: str) -> bool:
    return form_field in _BY_FORM_FIELD


def populated_slots(record) -> Iterator[Tuple[AssetSlot, str]]:
    """Yield ``(slot, reference)`` for every slot holding a reference on ``record``."""
    for slot in ASSET_SLOTS:
        reference = getattr(record, slot.attribute, None)
        if reference:
            yield slot, reference
