from typing import Dict

from droneverse.domain.entities.annotation_entity import Annotation
from droneverse.domain.entities.damage_entity import DamageEntry, DamageMap, ImageMetadata


def record_annotation(damages: DamageMap, image_id: str, metadata: ImageMetadata,
                      annotation: Annotation) -> Dict[str, DamageEntry]:
    """Merge one annotation into the damage map and return the new map.

    The input map is left untouched. The first recording for an image fixes its
    metadata; later recordings only append annotations.
    """
    if not image_id:
        raise ValueError("Image identity cannot be empty")
    updated = dict(damages)
    existing = updated.get(image_id)
    if existing is None:
        updated[image_id] = DamageEntry(
            image_url=metadata.image_url,
            image_public_id=image_id,
            turbine=metadata.turbine,
            blade=metadata.blade,
            side=metadata.side,
            annotations=(annotation,),
        )
    else:
        updated[image_id] = existing.with_annotation(annotation)
    return updated
