"""
HTML report rendering.

The report is a single self-contained page: chart data is embedded as JSON and
plotted client side with Chart.js loaded from a CDN.
"""

import html
import json
from typing import Any

from .chart_data import INITIAL_SEGMENT_LABEL
from .data_models import ChartSeries, HistoryEntry
from .history_builder import round_half_away_from_zero

CDN_SCRIPTS = [
    "https://cdn.jsdelivr.net/npm/chart.js",
    "https://cdn.jsdelivr.net/npm/chartjs-adapter-date-fns",
    "https://cdn.jsdelivr.net/npm/chartjs-plugin-annotation",
    "https://cdn.jsdelivr.net/npm/nouislider@15.7.0/dist/nouislider.min.js",
]
CDN_STYLES = [
    "https://cdn.jsdelivr.net/npm/nouislider@15.7.0/dist/nouislider.min.css",
]

# Rolling average line styles keyed by window size
ROLLING_STYLES = {
    7: {"color": "#FF5733", "fill": "rgba(255, 87, 51, 0.15)", "dash": []},
    30: {"color": "#3498DB", "fill": "rgba(52, 152, 219, 0.15)", "dash": [8, 4]},
}
DEFAULT_ROLLING_STYLE = {"color": "#7f8c8d", "fill": "rgba(0, 0, 0, 0.05)", "dash": []}

REPORT_CSS = """
body {
    font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, Helvetica, Arial, sans-serif;
    margin: 0;
    padding: 20px;
    background-color: #f5f5f5;
}
.container {
    max-width: 1200px;
    margin: 0 auto;
    background-color: white;
    border-radius: 8px;
    box-shadow: 0 2px 10px rgba(0, 0, 0, 0.1);
    padding: 20px;
}
h1 { text-align: center; color: #333; margin-top: 0; }
h2 { color: #333; margin-top: 40px; }
.chart-container { position: relative; height: 60vh; width: 100%; }
.slider-container { margin: 20px 0; padding: 0 10px; }
#time-slider { height: 10px; margin-top: 40px; }
.time-display { display: flex; justify-content: space-between; margin-top: 15px; }
.stats {
    margin: 20px 0;
    display: flex;
    justify-content: space-around;
    background-color: #f8f9fa;
    border-radius: 8px;
    padding: 15px;
}
.stat-box { text-align: center; }
.stat-value { font-size: 24px; font-weight: bold; color: #0066cc; }
.stat-label { font-size: 14px; color: #6c757d; }
table { width: 100%; border-collapse: collapse; margin-top: 20px; }
th {
    background-color: #f8f9fa;
    padding: 12px 15px;
    text-align: left;
    font-weight: 600;
    font-size: 14px;
    border-bottom: 2px solid #dee2e6;
}
td { padding: 10px 15px; border-bottom: 1px solid #e9ecef; font-size: 14px; }
tr:hover { background-color: #f8f9fa; }
.version-color {
    display: inline-block;
    width: 20px;
    height: 20px;
    border-radius: 50%;
    margin-right: 8px;
    vertical-align: middle;
}
.version-name { font-weight: 600; vertical-align: middle; }
.positive { color: #28a745; }
.negative { color: #cc0000; }
"""

# Reads the REPORT object embedded by the renderer
REPORT_JS = """
const verticalLinePlugin = {
    id: 'verticalLine',
    afterDraw: (chart) => {
        if (chart.tooltip._active && chart.tooltip._active.length) {
            const { ctx } = chart;
            const { x } = chart.tooltip._active[0].element.getCenterPoint();
            ctx.save();
            ctx.beginPath();
            ctx.moveTo(x, chart.scales.y.top);
            ctx.lineTo(x, chart.scales.y.bottom);
            ctx.lineWidth = 1;
            ctx.strokeStyle = '#aaaaaa';
            ctx.setLineDash([3, 3]);
            ctx.stroke();
            ctx.restore();
        }
    }
};

const annotations = REPORT.releases.map((release, index) => ({
    type: 'line',
    xMin: REPORT.labels[release.index],
    xMax: REPORT.labels[release.index],
    borderColor: REPORT.colors[index],
    borderWidth: 2,
    borderDash: [5, 5],
    label: {
        content: 'v' + release.version,
        display: true,
        position: 'start',
        backgroundColor: REPORT.colors[index],
        color: 'white',
        font: { size: 10 }
    }
}));

const chart = new Chart(document.getElementById('downloadsChart').getContext('2d'), {
    type: 'line',
    data: { labels: REPORT.labels, datasets: REPORT.datasets },
    options: {
        responsive: true,
        maintainAspectRatio: false,
        interaction: { intersect: false, mode: 'index' },
        plugins: {
            legend: { position: 'top' },
            title: {
                display: true,
                text: REPORT.title + ' Plugin Downloads Over Time',
                font: { size: 16 }
            },
            tooltip: {
                callbacks: {
                    label: function(context) {
                        if (context.parsed.y === null) return;
                        return context.dataset.label + ': ' +
                            (context.parsed.y || 0).toLocaleString() + ' downloads';
                    }
                }
            },
            annotation: { annotations: annotations }
        },
        scales: {
            x: {
                type: 'time',
                time: {
                    unit: 'month',
                    tooltipFormat: 'MMM d, yyyy',
                    displayFormats: { month: 'MMM yyyy' }
                },
                title: { display: true, text: 'Date' }
            },
            y: {
                beginAtZero: true,
                position: 'left',
                title: { display: true, text: 'Total Downloads' }
            },
            y1: {
                type: 'linear',
                position: 'right',
                beginAtZero: true,
                title: { display: true, text: 'Growth Rate (downloads/day)' },
                grid: { drawOnChartArea: false }
            }
        }
    },
    plugins: [verticalLinePlugin]
});

if (REPORT.labels.length > 1) {
    const slider = document.getElementById('time-slider');
    const formatDate = (timestamp) => new Date(timestamp).toLocaleDateString('en-US', {
        year: 'numeric', month: 'short', day: 'numeric'
    });
    noUiSlider.create(slider, {
        start: [REPORT.oldest, REPORT.newest],
        connect: true,
        step: 86400000,
        range: { min: REPORT.oldest, max: REPORT.newest },
        format: { to: Math.round, from: Math.round }
    });
    slider.noUiSlider.on('update', (values) => {
        document.getElementById('time-start').textContent = formatDate(values[0]);
        document.getElementById('time-end').textContent = formatDate(values[1]);
    });
    slider.noUiSlider.on('change', (values) => {
        chart.options.scales.x.min = new Date(parseInt(values[0])).toISOString();
        chart.options.scales.x.max = new Date(parseInt(values[1])).toISOString();
        chart.update();
    });
}
"""


class ReportRenderer:
    """Renders a ChartSeries as a standalone HTML document."""

    def build_datasets(self, series: ChartSeries) -> list[dict[str, Any]]:
        """Chart.js dataset definitions for the series."""
        n = series.point_count
        datasets: list[dict[str, Any]] = []

        for segment in series.segments:
            label = segment.label
            if label != INITIAL_SEGMENT_LABEL:
                label = f"v{label}"
            data = (
                [None] * segment.start
                + series.totals[segment.start : segment.end]
                + [None] * (n - segment.end)
            )
            datasets.append(
                {
                    "label": label,
                    "data": data,
                    "borderColor": segment.color,
                    "backgroundColor": f"{segment.color}22",
                    "borderWidth": 3,
                    "pointRadius": 1,
                    "pointHoverRadius": 4,
                    "pointBackgroundColor": segment.color,
                    "fill": True,
                    "tension": 0.1,
                    "yAxisID": "y",
                }
            )

        datasets.append(
            {
                "label": "Daily Growth Rate",
                "data": [{"x": p.x, "y": p.y} for p in series.growth],
                "borderColor": "#000000",
                "backgroundColor": "rgba(0, 0, 0, 0.1)",
                "borderWidth": 1.5,
                "pointRadius": 0,
                "pointHoverRadius": 4,
                "fill": False,
                "tension": 0.1,
                "yAxisID": "y1",
                "borderDash": [2, 2],
            }
        )

        for window, points in series.rolling_averages.items():
            style = ROLLING_STYLES.get(window, DEFAULT_ROLLING_STYLE)
            datasets.append(
                {
                    "label": f"{window}-Day Rolling Avg",
                    "data": [
                        {"x": p.x, "y": round_half_away_from_zero(p.y)} for p in points
                    ],
                    "borderColor": style["color"],
                    "backgroundColor": style["fill"],
                    "borderWidth": 3,
                    "pointRadius": 0,
                    "pointHoverRadius": 4,
                    "fill": True,
                    "tension": 0.1,
                    "yAxisID": "y1",
                    "borderDash": style["dash"],
                }
            )

        return datasets

    def build_payload(
        self, series: ChartSeries, oldest_ms: int, newest_ms: int
    ) -> dict[str, Any]:
        """Data embedded in the page for the chart script."""
        return {
            "title": series.title,
            "labels": series.labels,
            "datasets": self.build_datasets(series),
            "releases": [
                {
                    "version": r.version,
                    "date": r.date,
                    "index": r.index,
                    "downloads": r.downloads,
                }
                for r in series.releases
            ],
            "colors": series.colors,
            "oldest": oldest_ms,
            "newest": newest_ms,
        }

    def render(self, series: ChartSeries, entries: list[HistoryEntry]) -> str:
        """Render the full HTML document.

        Args:
            series: Computed chart data
            entries: The history the series was computed from (for tables)

        Returns:
            HTML page as a string
        """
        title = html.escape(series.title)
        oldest_ms = entries[0].timestamp_ms if entries else 0
        newest_ms = entries[-1].timestamp_ms if entries else 0
        payload = json.dumps(self.build_payload(series, oldest_ms, newest_ms))
        # Keep "</script>" in plugin names from closing the script element
        payload = payload.replace("</", "<\\/")

        styles = "\n".join(
            f'    <link rel="stylesheet" href="{href}">' for href in CDN_STYLES
        )
        scripts = "\n".join(f'    <script src="{src}"></script>' for src in CDN_SCRIPTS)

        return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{title} Download Statistics</title>
{scripts}
{styles}
    <style>{REPORT_CSS}</style>
</head>
<body>
    <div class="container">
        <h1>{title} Download Statistics</h1>
{self._render_stats(series)}
        <div class="chart-container">
            <canvas id="downloadsChart"></canvas>
        </div>
        <div class="slider-container">
            <div id="time-slider"></div>
            <div class="time-display">
                <div id="time-start"></div>
                <div id="time-end"></div>
            </div>
        </div>
        <h2>Versions</h2>
{self._render_version_table(series)}
        <h2>History</h2>
{self._render_history_table(entries)}
    </div>
    <script>
const REPORT = {payload};
{REPORT_JS}
    </script>
</body>
</html>
"""

    def _render_stats(self, series: ChartSeries) -> str:
        date_range = series.date_range
        range_text = f"{date_range[0]} - {date_range[1]}" if date_range else "N/A"
        boxes = [
            (f"{series.point_count}", "Data Points"),
            (f"{len(series.releases)}", "Versions Released"),
            (f"{series.latest_downloads:,}", "Latest Downloads"),
            (range_text, "Date Range"),
        ]
        lines = ['        <div class="stats">']
        for value, label in boxes:
            lines.append(
                '            <div class="stat-box">'
                f'<div class="stat-value">{value}</div>'
                f'<div class="stat-label">{label}</div></div>'
            )
        lines.append("        </div>")
        return "\n".join(lines)

    def _render_version_table(self, series: ChartSeries) -> str:
        lines = [
            '        <table class="version-table">',
            "            <thead><tr><th>Version</th><th>Release Date</th>"
            "<th>Downloads at Release</th></tr></thead>",
            "            <tbody>",
        ]
        for release, color in zip(series.releases, series.colors, strict=True):
            lines.append(
                "                <tr>"
                f'<td><span class="version-color" style="background-color: {color}">'
                f'</span><span class="version-name">v{html.escape(release.version)}'
                "</span></td>"
                f"<td>{release.date}</td>"
                f"<td>{release.downloads:,}</td></tr>"
            )
        lines.append("            </tbody>")
        lines.append("        </table>")
        return "\n".join(lines)

    def _render_history_table(self, entries: list[HistoryEntry]) -> str:
        lines = [
            '        <table class="history-table">',
            "            <thead><tr><th>Date</th><th>Downloads</th>"
            "<th>Increase</th><th>Daily Growth</th><th>Versions</th></tr></thead>",
            "            <tbody>",
        ]
        for index, entry in enumerate(entries):
            increase = entry.downloads - entries[index - 1].downloads if index else 0
            if increase > 0:
                css_class, increase_text = "positive", f"+{increase:,}"
            elif increase < 0:
                css_class, increase_text = "negative", f"{increase:,}"
            else:
                css_class, increase_text = "", "0"
            versions = html.escape(", ".join(entry.versions))
            lines.append(
                "                <tr>"
                f"<td>{entry.date}</td>"
                f"<td>{entry.downloads:,}</td>"
                f'<td class="{css_class}">{increase_text}</td>'
                f"<td>{entry.daily_growth:,}</td>"
                f"<td>{versions}</td></tr>"
            )
        lines.append("            </tbody>")
        lines.append("        </table>")
        return "\n".join(lines)
