"""Shape space: normalization, simplification, strokes, text and SVG shapes."""

from .glyphs import (  # noqa: F401
    AnalogDigitGlyphSource,
    FontGlyphSource,
    Glyph,
    GlyphCache,
    GlyphSource,
    text_to_analog_path,
    text_to_path,
)
from .normalizer import (  # noqa: F401
    get_bounds,
    normalize_path,
    rotate_path,
    scale_normalized_path,
    calculate_path_length,
)
from .simplifier import (  # noqa: F401
    remove_duplicates,
    simplify_path,
    simplify_to_point_count,
    uniform_sample,
)
from .strokes import (  # noqa: F401
    commands_to_strokes,
    filter_largest_strokes,
    merge_strokes,
    optimize_stroke_order,
)
from .svg_shapes import (  # noqa: F401
    AVAILABLE_SHAPES,
    get_shape_by_id,
    load_shape,
    svg_file_to_path,
)
