"""
Style catalog — maps a style name to the prompt sent to the AI service.

The catalog is deliberately dumb: a dict keyed by name. Pricing and the UI's
example images live with the caller; the pipeline only needs prompt text.
"""

from dataclasses import dataclass
from typing import Iterable, Optional

from common.errors import StyleNotFoundError


@dataclass(frozen=True)
class Style:
    name: str
    description: str
    prompt_template: str
    point_cost: int = 1


DEFAULT_STYLES: tuple[Style, ...] = (
    Style(
        name="Ghibli Anime Style",
        description="Warm, dreamy Studio Ghibli animation style",
        prompt_template=(
            "Transform this image into a warm, dreamy anime style reminiscent of "
            "classic Japanese animation, with soft colors, detailed backgrounds, "
            "and charming character designs."
        ),
    ),
    Style(
        name="宫崎骏风格",
        description="温暖、多彩的手绘风格，力求展现宫崎骏作品中的动画风格",
        prompt_template="将这张图片转换成宫崎骏动画风格，温暖的色调，细致的背景，以及富有魅力的人物设计。",
    ),
    Style(
        name="人物包装盒",
        description="将人物设计成适合真实的仿人偶包装盒",
        prompt_template="将这张人物照片转换成一个精美的人偶玩具包装盒，包括包装盒设计、标签和产品详情。",
    ),
    Style(
        name="Watercolor Art",
        description="Soft, flowing watercolor painting style",
        prompt_template=(
            "Transform this image into a delicate watercolor painting with soft, "
            "flowing colors, gentle brush strokes, and artistic texture that gives "
            "it an elegant hand-painted feel."
        ),
    ),
    Style(
        name="Cyberpunk Neon",
        description="Futuristic neon-lit cyberpunk aesthetic",
        prompt_template=(
            "Transform this image into a futuristic cyberpunk scene with vibrant "
            "neon lights, high-tech elements, urban dystopian atmosphere, and a "
            "color palette dominated by electric blues, pinks, and purples."
        ),
    ),
    Style(
        name="Van Gogh Style",
        description="Bold brushstrokes and vivid colors",
        prompt_template=(
            "Transform this image into the distinctive style of Vincent Van Gogh, "
            "with bold, visible brushstrokes, swirling patterns, intense colors, "
            "and the emotional, expressive quality characteristic of his paintings."
        ),
    ),
)


class StyleCatalog:

    def __init__(self, styles: Iterable[Style] = DEFAULT_STYLES):
        self._styles: dict[str, Style] = {s.name: s for s in styles}

    def get(self, name: str) -> Optional[Style]:
        return self._styles.get(name)

    def prompt_for(self, name: str) -> str:
        """Return the prompt text for `name`. Raises StyleNotFoundError if unknown."""
        style = self._styles.get(name)
        if style is None:
            raise StyleNotFoundError(name)
        return style.prompt_template

    def all(self) -> list[Style]:
        return list(self._styles.values())
