import json


def format_zoom(zoom: float) -> str:
    # 1.0 -> "1", 2.5 -> "2.5"
    return f"{zoom:g}"


def build_dimension_prompt(zoom: float = 1.0) -> str:
    z = format_zoom(zoom)
    return f"""Analyze this wall image carefully. Take the following into account:

1. ZOOM LEVEL: this photo was taken at a zoom level of {z}x
   - zoom > 1: a closer, more detailed view; objects appear larger than they are
   - zoom < 1: a wider, more distant view; objects appear smaller than they are
   - zoom = 1: a standard view with normal perspective

2. DISTANCE TO THE WALL:
   - Work out how far the camera was from the wall
   - Use visual cues such as shadows, perspective lines and the relationships between objects
   - Compare the apparent size of familiar objects (doors, outlets, switches) with their usual size
   - Judge the depth of the scene

3. DIMENSIONS:
   - Correct your size estimate for the zoom level
   - Correct for camera distance and perspective distortion
   - Report the real size of the wall, not its apparent size in the image

Estimate the width and height of the wall in feet. Reply with a single line of JSON and nothing else: {{"width": <number>, "height": <number>}}"""


def _box() -> dict:
    return {
        "x": "percentage_from_left_edge",
        "y": "percentage_from_top_edge",
        "width": "percentage_of_image_width",
        "height": "percentage_of_image_height",
    }


def _element(name: str, **extra) -> dict:
    item = {"name": name, "confidence": "high/medium/low", "bounding_box": _box()}
    item.update(extra)
    return item


AREA = "estimated area in square feet"

DETECTION_SCHEMA = {
    "objects": [
        _element(
            "specific object name (be descriptive)",
            description="detailed description of the object",
            type=(
                "wall/window/door/ceiling/floor/furniture/appliance/electronics/decorative/"
                "text/fixture/molding/trim/railing/cabinetry/accent_wall"
            ),
        )
    ],
    "architectural_elements": {
        "walls": [
            _element(
                "specific wall description (e.g. 'left wall', 'back wall', 'partial wall')",
                orientation="vertical/horizontal/angled/curved",
                shape="rectangular/triangular/curved/irregular",
                accent=True,
                surface_area=AREA,
            )
        ],
        "moldings": [_element("crown/dentil/base/casing/other", style="dentil/cove/ogee/etc")],
        "railings": [_element("railing description (e.g. 'curved stair railing')", curved=True)],
        "cabinetry": [_element("built-in cabinetry/shelving description")],
        "ceilings": [_element("ceiling description", surface_area=AREA)],
        "ceilings_special": [_element("tray/coffered ceiling description", type="tray/coffered/other")],
        "floors": [_element("floor description", surface_area=AREA)],
    },
    "scene": "detailed overall scene description",
    "summary": "comprehensive summary of all detected elements",
    "room_dimensions": {
        "estimated_width": "estimated room width in feet",
        "estimated_height": "estimated room height in feet",
        "estimated_length": "estimated room length in feet",
    },
}

ARCHITECTURAL_ELEMENTS = [
    "All walls (vertical surfaces, including partial walls)",
    "Ceilings (horizontal upper surfaces)",
    "Floors (horizontal lower surfaces)",
    "All windows (including frames, sills and glass)",
    "All doors (including frames, handles and hinges)",
    "Doorways and openings",
    "Wall corners and edges",
    "Baseboards and trim",
    "Moldings and architectural details (explicitly include dentil crown moulding)",
    "Stairs and railings (note curved railings where applicable)",
    "Columns and structural supports",
    "Built-in cabinetry and shelving",
    "Tray ceilings and coffered ceilings",
    "Triangular wall segments and other non-orthogonal walls",
    "Curved walls or segments",
    "Decorative trim, paneling, wainscoting and accent walls",
]

FURNISHINGS = [
    "All furniture (tables, chairs, beds, sofas, cabinets, etc.)",
    "Appliances (refrigerators, stoves, dishwashers, etc.)",
    "Electronics (TVs, computers, phones, etc.)",
    "Decorative items (pictures, plants, vases, etc.)",
    "Storage items (boxes, containers, etc.)",
    "Any other visible objects",
]

FIXTURES = [
    "Lighting fixtures and lamps",
    "Outlets and switches",
    "Heating/cooling vents",
    "Smoke detectors",
    "Any other fixtures or hardware",
]

REQUIREMENTS = [
    "Be extremely thorough; do not miss any visible object or element",
    "Pay special attention to walls, windows, doors and architectural features",
    "All bounding box coordinates must be percentages (0-100) relative to the image dimensions",
    "Give detailed, specific names for each object, not generic terms",
    "Include confidence levels based on clarity and visibility",
    "Cover the entire image area",
    (
        "Explicitly identify irregular geometries such as triangular segments, curved walls "
        "or railings, tray ceilings, dentil crown moulding, built-in cabinetry, decorative trim "
        "and accent walls"
    ),
]


def _bullets(items) -> str:
    return "\n".join(f"   - {item}" for item in items)


def build_detection_prompt() -> str:
    schema = json.dumps(DETECTION_SCHEMA, indent=2)
    requirements = "\n".join(f"- {r}" for r in REQUIREMENTS)
    return f"""Analyze this image comprehensively and detect ALL objects, elements and features present, with precise bounding box coordinates. Be extremely thorough and do not miss any visible element.

Identify EVERYTHING visible in the image:

1. Architectural elements (primary focus):
{_bullets(ARCHITECTURAL_ELEMENTS)}

2. Furniture and objects:
{_bullets(FURNISHINGS)}

3. Environmental elements:
{_bullets(FIXTURES)}

Respond with one JSON object following this structure:
{schema}

CRITICAL REQUIREMENTS:
{requirements}"""
