"""Instruction prompts sent with multi-image composition and refinement calls."""

from __future__ import annotations

REFINEMENT_PREAMBLE = (
    "You are an expert image editor. Modify the provided image according to the user's "
    "instructions. Maintain the overall composition and only change what is specifically "
    "requested. Output a single modified image."
)


def product_image_labels(product_count: int) -> str:
    """Image C onward, one label per product reference."""
    if product_count <= 0:
        return ""
    if product_count == 1:
        return "Image C = Product to insert"
    return "\n".join(
        f"Image {chr(ord('C') + i)} = Product reference (angle {i + 1})" for i in range(product_count)
    )


def build_composition_prompt(prompt: str, product_count: int = 0) -> str:
    """Label the images A (sketch), B (environment), C.. (products) and state the edit rules."""
    has_products = product_count > 0
    multi = product_count > 1

    if has_products:
        task = "compositing the product into the scene at the position indicated in Image A. "
        if multi:
            task += (
                f"You have {product_count} reference images showing different angles of the same "
                "product - use them to understand the product's full appearance and choose the best "
                "angle/perspective for the composition."
            )
        placement_rule = "Place the product EXACTLY where arrows point in Image A"
    else:
        task = "modifying it according to Image A annotations"
        placement_rule = "Follow arrows and annotations in Image A for modifications"

    rules = [
        "Use Image B as the BASE - edit only this image",
        placement_rule,
        "Match perspective, scale, lighting, and shadows to Image B",
        "Remove ALL annotations (arrows, circles, text, rectangles)",
        "Output a SINGLE FINAL IMAGE ONLY - no collage, no side-by-side, do not include Image A"
        + (" or the product reference images" if has_products else "")
        + " as separate panels",
        "Keep the EXACT resolution and aspect ratio of Image B (no crop, no resize)",
        "Maintain photorealism and natural integration",
    ]
    if multi:
        rules.append(
            "Use all product reference images to understand the complete product, "
            "but only composite ONE instance of the product into the scene"
        )

    header = [
        "Image A = Sketch with annotations (arrows, circles, text showing placement)",
        "Image B = Environment (BASE IMAGE - edit this one)",
    ]
    labels = product_image_labels(product_count)
    if labels:
        header.append(labels)

    numbered = "\n".join(f"{i}. {rule}" for i, rule in enumerate(rules, start=1))
    return (
        "\n".join(header)
        + f"\n\nTASK:\nEdit Image B only by {task}.\n\nCRITICAL RULES:\n{numbered}"
        + f"\n\nUser Instructions: {prompt}"
    )


def build_refinement_prompt(prompt: str) -> str:
    return (
        f"{REFINEMENT_PREAMBLE}\n\n"
        f"Please modify this image according to the following instructions:\n{prompt}"
    )
