"""Dashboard image composer: metric cards, uptime panel, and trend charts."""

from __future__ import annotations

import base64
from collections.abc import Mapping, Sequence
from io import BytesIO
from pathlib import Path

from PIL import Image, ImageDraw, ImageFont

from hostpulse_telemetry import SystemSnapshot

from .formatters import build_chart_series, format_uptime, free_percent, leading_zero_count, pad_usage
from .models import ChartSeries, SeriesMeta, ThemeConfig
from .themes import get_theme

CARD_ACCENTS = {
    "Processor": "#3B82F6",
    "Memory": "#EF4444",
    "GPU": "#8B5CF6",
    "Storage": "#10B981",
}


def _rgb(color: str) -> tuple[int, int, int]:
    return tuple(int(color[i : i + 2], 16) for i in (1, 3, 5))  # type: ignore[return-value]


class DashboardRenderer:
    """Draws the dashboard for one published state."""

    def __init__(self, width: int = 1200, height: int = 720, capacity: int = 20) -> None:
        self.width = width
        self.height = height
        self.capacity = capacity

    def render_image(
        self,
        snapshot: SystemSnapshot,
        windows: Mapping[str, Sequence[float]],
        streams: Mapping[str, SeriesMeta],
        theme_name: str | None = None,
    ) -> Image.Image:
        theme = get_theme(theme_name)
        image = Image.new("RGB", (self.width, self.height), theme.background_start)
        draw = ImageDraw.Draw(image)

        self._paint_gradient(draw, theme)
        self._draw_cards(draw, theme, snapshot)

        top = int(self.height * 0.48)
        split = int(self.width * 0.4)
        self._draw_uptime(draw, theme, snapshot.uptime_seconds, (24, top, split - 12, self.height - 24))
        mid = (top + self.height - 24) // 2
        self._draw_chart(
            draw,
            theme,
            "% Utilization",
            build_chart_series(windows, streams, self.capacity, "utilization"),
            (split + 12, top, self.width - 24, mid - 6),
            fixed_max=100.0,
        )
        self._draw_chart(
            draw,
            theme,
            "Temperature",
            build_chart_series(windows, streams, self.capacity, "temperature"),
            (split + 12, mid + 6, self.width - 24, self.height - 24),
        )
        return image

    def save_png(self, image: Image.Image, path: Path) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        image.save(path, format="PNG")
        return path

    def preview_data_url(self, image: Image.Image) -> str:
        buf = BytesIO()
        image.save(buf, format="PNG")
        b64 = base64.b64encode(buf.getvalue()).decode("ascii")
        return f"data:image/png;base64,{b64}"

    def _font(self, size: int, mono: bool = False):
        preferred = "DejaVuSansMono.ttf" if mono else "DejaVuSans.ttf"
        try:
            return ImageFont.truetype(preferred, size)
        except OSError:
            try:
                return ImageFont.truetype("Arial.ttf", size)
            except OSError:
                return ImageFont.load_default()

    def _paint_gradient(self, draw: ImageDraw.ImageDraw, theme: ThemeConfig) -> None:
        top = _rgb(theme.background_start)
        bottom = _rgb(theme.background_end)
        for y in range(self.height):
            t = y / max(self.height - 1, 1)
            color = tuple(int(top[i] * (1 - t) + bottom[i] * t) for i in range(3))
            draw.line((0, y, self.width, y), fill=color)

    def _draw_usage(self, draw: ImageDraw.ImageDraw, xy: tuple[int, int], percent: int, color: str, theme: ThemeConfig) -> None:
        font = self._font(44, mono=True)
        text = pad_usage(percent)
        dimmed = leading_zero_count(text)
        x, y = xy
        for index, char in enumerate(text + "%"):
            fill = theme.text_dim if index < dimmed else color
            draw.text((x, y), char, font=font, fill=fill)
            x += int(draw.textlength(char, font=font))

    def _cards(self, s: SystemSnapshot) -> list[tuple[str, str, int, list[tuple[str, str]]]]:
        p, m = s.processor, s.memory
        cards = [
            (
                "Processor",
                p.model,
                p.usage_percent,
                [(str(p.cores), "Cores"), (f"{p.speed_ghz:g} GHz", "Speed"), (f"{p.temperature_c:.0f}°C", "Temp")],
            ),
            (
                "Memory",
                m.module_description,
                m.usage_percent,
                [(f"{m.available_gib} GB", "Available"), (f"{m.total_gib} GB", "Total")],
            ),
        ]
        if s.gpu is not None:
            g = s.gpu
            cards.append(
                (
                    "GPU",
                    g.model,
                    g.usage_percent,
                    [(f"{g.vram_used_gib} GB", "VRAM Used"), (f"{g.vram_total_gib} GB", "Total VRAM"), (f"{g.temperature_c:.0f}°C", "Temp")],
                )
            )
        if s.storage:
            disk = s.storage[0]
            cards.append(
                (
                    "Storage",
                    f"{disk.total_gib} GB Total",
                    disk.usage_percent,
                    [(f"{free_percent(disk)}%", "Free"), (f"{disk.total_gib} GB", "Total")],
                )
            )
        else:
            cards.append(("Storage", "No mounted storage", 0, []))
        return cards

    def _draw_cards(self, draw: ImageDraw.ImageDraw, theme: ThemeConfig, s: SystemSnapshot) -> None:
        cards = self._cards(s)
        gap = 24
        width = (self.width - gap * (len(cards) + 1)) // len(cards)
        y0, y1 = 24, int(self.height * 0.48) - 12

        for index, (title, subtitle, usage, stats) in enumerate(cards):
            x0 = gap + index * (width + gap)
            x1 = x0 + width
            accent = CARD_ACCENTS[title]
            draw.rounded_rectangle((x0, y0, x1, y1), radius=12, fill=theme.card_bg)
            draw.text((x0 + 16, y0 + 12), title, font=self._font(22), fill=accent)
            draw.text((x0 + 16, y0 + 44), subtitle[:36], font=self._font(13), fill=theme.text_secondary)
            self._draw_usage(draw, (x0 + 16, y0 + 72), usage, accent, theme)
            draw.text((x0 + 16, y0 + 128), f"{title.lower()} usage", font=self._font(13), fill=theme.text_dim)

            if stats:
                col = width // len(stats)
                for i, (value, label) in enumerate(stats):
                    cx = x0 + i * col + 16
                    draw.text((cx, y1 - 58), value, font=self._font(16, mono=True), fill=theme.text_primary)
                    draw.text((cx, y1 - 34), label, font=self._font(12), fill=theme.text_dim)

    def _draw_uptime(self, draw: ImageDraw.ImageDraw, theme: ThemeConfig, seconds: float, box: tuple[int, int, int, int]) -> None:
        x0, y0, x1, y1 = box
        draw.rounded_rectangle(box, radius=12, fill=theme.card_bg)
        draw.text((x0 + 16, y0 + 12), "Uptime", font=self._font(22), fill="#2DD4BF")

        parts = format_uptime(seconds).as_dict()
        gap = 12
        cell = (x1 - x0 - gap * (len(parts) + 1)) // len(parts)
        cy0 = (y0 + y1) // 2 - 40
        for i, (label, value) in enumerate(parts.items()):
            cx0 = x0 + gap + i * (cell + gap)
            draw.rounded_rectangle((cx0, cy0, cx0 + cell, cy0 + 80), radius=8, fill=theme.panel_bg)
            draw.text((cx0 + 12, cy0 + 8), f"{value:02d}", font=self._font(32, mono=True), fill=theme.text_primary)
            draw.text((cx0 + 12, cy0 + 54), label.upper(), font=self._font(11), fill=theme.text_dim)

    def _draw_chart(
        self,
        draw: ImageDraw.ImageDraw,
        theme: ThemeConfig,
        title: str,
        series: list[ChartSeries],
        box: tuple[int, int, int, int],
        fixed_max: float | None = None,
    ) -> None:
        x0, y0, x1, y1 = box
        draw.rounded_rectangle(box, radius=12, fill=theme.card_bg)
        draw.text((x0 + 16, y0 + 8), title, font=self._font(16), fill=theme.text_primary)

        visible = [s for s in series if not s.hidden]
        legend_x = x0 + 180
        for s in visible:
            draw.line((legend_x, y0 + 18, legend_x + 18, y0 + 18), fill=s.color, width=3)
            draw.text((legend_x + 24, y0 + 10), s.label, font=self._font(12), fill=theme.text_secondary)
            legend_x += 40 + int(draw.textlength(s.label, font=self._font(12)))

        px0, py0, px1, py1 = x0 + 40, y0 + 36, x1 - 16, y1 - 12
        if fixed_max is not None:
            y_max = fixed_max
        else:
            peak = max((v for s in visible for v in s.values if v is not None), default=0.0)
            y_max = max(peak * 1.2, 10.0)

        for step in range(0, 5):
            gy = py1 - (py1 - py0) * step / 4
            draw.line((px0, gy, px1, gy), fill=theme.grid, width=1)
            draw.text((x0 + 8, gy - 7), f"{y_max * step / 4:.0f}", font=self._font(10, mono=True), fill=theme.text_dim)

        for s in visible:
            n = len(s.values)
            dx = (px1 - px0) / max(n - 1, 1)
            points = []
            for i, value in enumerate(s.values):
                if value is None:
                    continue
                ratio = min(max(value / y_max, 0.0), 1.0)
                points.append((px0 + i * dx, py1 - (py1 - py0) * ratio))
            if len(points) > 1:
                draw.line(points, fill=s.color, width=2)
            elif points:
                px, py = points[0]
                draw.ellipse((px - 2, py - 2, px + 2, py + 2), fill=s.color)
