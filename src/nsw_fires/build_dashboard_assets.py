#!/usr/bin/env python3
"""Generate the bushfire dashboard assets (data + HTML) from the static JSON files."""
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import pandas as pd

from nsw_fires import aggregation
from nsw_fires.attribution import regional_hotspots
from nsw_fires.build_static_data import FIRES_FILE, SUBURBS_FILE
from nsw_fires.fire_research import FIRE_RESEARCH
from nsw_fires.records import FireRecord, records_from_frame

OUTPUT_DIR = Path(os.environ.get('NSW_FIRES_DASHBOARD_OUTPUT', Path.cwd() / 'dashboard'))
ATTRIBUTION_STRIDE = int(os.environ.get('NSW_FIRES_ATTRIBUTION_STRIDE', 10))
HEATMAP_END_YEAR = 2024
HEATMAP_WINDOW_YEARS = 15

COLORS = {
    'wildfire': '#ff8ab7',
    'prescribedBurn': '#a463f2',
    'accent1': '#a463f2',
    'accent2': '#ff8ab7',
    'accent3': '#6cc5b0',
    'periodMuted': '#d4b5f7',
    'heatmap': {'scheme': 'YlOrRd', 'low': '#ffffcc', 'mid': '#fd8d3c', 'high': '#800026'},
}
FIRE_TYPE_SCALE = {
    'domain': ['Wildfire', 'Prescribed Burn'],
    'range': [COLORS['wildfire'], COLORS['prescribedBurn']],
}
HEATMAP_THRESHOLDS = [1, 10, 50, 100, 200, 400]


def load_fires(path: Optional[Path] = None) -> List[FireRecord]:
    path = Path(path or FIRES_FILE)
    if not path.exists():
        raise FileNotFoundError(f"Missing fire dataset: {path} (run nsw-fires-static-data first)")
    df = pd.DataFrame(json.loads(path.read_text(encoding='utf-8')))
    required = {'StartDate', 'd_FireType'}
    missing = required - set(df.columns)
    if missing:
        raise RuntimeError(f"Fire dataset missing columns: {missing}")
    return records_from_frame(df)


def load_suburbs(path: Optional[Path] = None) -> Dict:
    path = Path(path or SUBURBS_FILE)
    if not path.exists():
        raise FileNotFoundError(f"Missing suburb boundaries: {path} (run nsw-fires-static-data suburbs)")
    collection = json.loads(path.read_text(encoding='utf-8'))
    if 'features' not in collection:
        raise RuntimeError(f"Suburb boundaries at {path} are not a FeatureCollection")
    return collection


def _generate_sequential_scale(base: str, steps: int = len(HEATMAP_THRESHOLDS) + 1) -> List[str]:
    """Blend from a near-white tint up to ``base`` in equal steps."""
    red, green, blue = (int(base[i:i + 2], 16) for i in (1, 3, 5))
    scale = []
    for step in range(steps):
        weight = 0.15 + 0.85 * step / max(steps - 1, 1)
        mixed = [round(255 - (255 - channel) * weight) for channel in (red, green, blue)]
        scale.append('#' + ''.join(f"{channel:02x}" for channel in mixed))
    return scale


def build_payload(fires: Sequence[FireRecord], suburbs: Dict, stride: int = ATTRIBUTION_STRIDE) -> Dict:
    features = suburbs.get('features') or []
    scatter = aggregation.big_fires(fires)
    return {
        'palette': {
            'colors': COLORS,
            'fireType': FIRE_TYPE_SCALE,
            'heatmap': {
                'domain': HEATMAP_THRESHOLDS,
                'range': _generate_sequential_scale(COLORS['wildfire']),
            },
        },
        'firesByYear': aggregation.yearly_series(fires, metric='count', with_trend=True),
        'areaBurntByYear': aggregation.yearly_series(fires, metric='area', with_trend=False),
        'intensePeriods': aggregation.five_year_periods(fires, top_k=3),
        'seasonalHeatmap': aggregation.monthly_heatmap(
            fires,
            end_year=HEATMAP_END_YEAR,
            window_years=HEATMAP_WINDOW_YEARS,
        ),
        'bigFires': {
            'points': scatter,
            'annotations': aggregation.largest_per_window(scatter),
        },
        'firesByLocation2025': aggregation.fires_by_label(fires, year=2025),
        'regionalHotspots': {
            'stride': stride,
            'rows': regional_hotspots(fires, features, stride=stride),
        },
        'topLargestFires': aggregation.top_largest_fires(fires, FIRE_RESEARCH),
        'mapPoints': aggregation.map_points(fires),
    }


def write_data_js(payload: Dict, output_dir: Optional[Path] = None) -> Path:
    output_dir = Path(output_dir or OUTPUT_DIR)
    output_dir.mkdir(parents=True, exist_ok=True)
    data_js = output_dir / 'dashboard_data.js'
    data_js.write_text(f"window.FIRE_DASHBOARD = {json.dumps(payload, allow_nan=False)};\n", encoding='utf-8')
    print(f"✔️  Wrote {data_js}")
    return data_js


def write_suburbs_js(suburbs: Dict, output_dir: Optional[Path] = None) -> Path:
    output_dir = Path(output_dir or OUTPUT_DIR)
    output_dir.mkdir(parents=True, exist_ok=True)
    suburbs_js = output_dir / 'suburbs_data.js'
    suburbs_js.write_text(f"window.NSW_SUBURBS = {json.dumps(suburbs)};\n", encoding='utf-8')
    print(f"✔️  Wrote {suburbs_js}")
    return suburbs_js


def write_dashboard_html(output_dir: Optional[Path] = None) -> Path:
    output_dir = Path(output_dir or OUTPUT_DIR)
    output_dir.mkdir(parents=True, exist_ok=True)
    html_path = output_dir / 'dashboard.html'
    html_template = """<!DOCTYPE html>
<html lang='en'>
<head>
  <meta charset='utf-8' />
  <title>NSW Bushfires · Fire History 1970–2024</title>
  <meta name='viewport' content='width=device-width, initial-scale=1' />
  <style>
    * { box-sizing: border-box; }
    body { margin: 0; font-family: 'Inter', -apple-system, BlinkMacSystemFont, 'Segoe UI', sans-serif; background: #0b0b12; color: #e5e5ef; }
    header { padding: 36px 48px 12px; max-width: 1280px; margin: 0 auto; }
    h1 { font-size: clamp(2.2rem, 4vw, 3rem); margin-bottom: 0.4rem; }
    p.lead { color: #b8b8cc; max-width: 760px; }
    main { display: grid; grid-template-columns: repeat(auto-fit, minmax(560px, 1fr)); gap: 24px; padding: 0 48px 56px; max-width: 1280px; margin: 0 auto; }
    .card { background: #15151f; border: 1px solid rgba(148,163,184,0.2); border-radius: 16px; padding: 18px 22px; }
    .card.wide { grid-column: 1 / -1; }
    .card h2 { margin: 0 0 4px; font-size: 1.1rem; }
    .card p.meta { margin: 0 0 12px; color: #8f8fa6; font-size: 0.85rem; }
    .fire-entry { display: flex; gap: 0.5rem; margin-bottom: 1rem; padding-bottom: 1rem; border-bottom: 1px solid #595959; }
    .fire-entry h3 { margin: 0 0 0.35rem; font-size: 0.95rem; color: #ff8ab7; }
    .badge { display: inline-block; font-size: 0.65rem; font-weight: 700; padding: 0.15rem 0.4rem; margin-left: 0.5rem; border-radius: 3px; color: white; }
    .stats { display: flex; gap: 1.25rem; font-size: 0.8rem; font-weight: 600; }
    footer { text-align: center; color: #8f8fa6; padding-bottom: 32px; font-size: 0.85rem; }
  </style>
</head>
<body>
<header>
  <h1>NSW Bushfires</h1>
  <p class='lead'>Fifty-five years of wildfires and prescribed burns recorded by NSW National Parks and Wildlife Service.</p>
</header>
<main>
  <section class='card wide'><h2>Fire map</h2><p class='meta'>Every dated fire with a location, coloured by type.</p><div id='fire-map'></div></section>
  <section class='card'><h2>Fires by year</h2><p class='meta'>Dashed lines show the least-squares trend.</p><div id='fires-by-year'></div></section>
  <section class='card'><h2>Area burnt by year</h2><p class='meta'>Hectares burnt per year.</p><div id='area-burnt'></div></section>
  <section class='card'><h2>Most intense periods</h2><p class='meta'>Total area burnt per five-year period; top three highlighted.</p><div id='intense-periods'></div></section>
  <section class='card'><h2>Seasonal pattern</h2><p class='meta'>Wildfires per month, most recent fifteen years.</p><div id='seasonal-heatmap'></div></section>
  <section class='card'><h2>Big fires</h2><p class='meta'>Fires over 50,000 ha by start month.</p><div id='big-fires'></div></section>
  <section class='card'><h2>Regional hotspots</h2><p class='meta' id='hotspots-meta'></p><div id='regional-hotspots'></div></section>
  <section class='card'><h2>2025 fire distribution</h2><p class='meta'>Fires this year by label.</p><div id='fires-2025'></div></section>
  <section class='card wide'><h2>Most destructive fires</h2><p class='meta'>Ranked by deaths, homes lost, injuries and area.</p><div id='top-fires'></div></section>
</main>
<footer>Data source: <a href='https://datasets.seed.nsw.gov.au/dataset/fire-history-wildfires-and-prescribed-burns-1e8b6'>NSW DPIE Fire History</a></footer>
<script src='https://cdn.jsdelivr.net/npm/d3@7'></script>
<script src='https://cdn.jsdelivr.net/npm/@observablehq/plot@0.6'></script>
<script src='dashboard_data.js'></script>
<script src='suburbs_data.js'></script>
<script>
  const data = window.FIRE_DASHBOARD;
  const suburbs = window.NSW_SUBURBS;
  const palette = data.palette;
  const monthNames = ['Jan', 'Feb', 'Mar', 'Apr', 'May', 'Jun', 'Jul', 'Aug', 'Sep', 'Oct', 'Nov', 'Dec'];
  const mount = (id, node) => document.getElementById(id).appendChild(node);
  const width = (id) => document.getElementById(id).clientWidth || 560;
  const decadeTicks = d3.range(1970, 2026, 10);

  mount('fire-map', Plot.plot({
    width: width('fire-map'),
    margin: 0,
    style: { background: 'transparent' },
    projection: { type: 'mercator', domain: suburbs, inset: 30 },
    color: { type: 'categorical', legend: true, ...palette.fireType },
    marks: [
      Plot.geo(suburbs, { stroke: '#0b0b12', strokeWidth: 0.5, fill: '#2a2a38' }),
      Plot.dot(data.mapPoints, {
        x: 'longitude', y: 'latitude', fill: 'type', r: 4, fillOpacity: 0.6, tip: true,
        channels: { 'Fire Name': 'fireName', 'Area (ha)': 'areaHa', 'Date': 'date', 'Type': 'fireType' },
      }),
    ],
  }));

  const yearlyMarks = [];
  data.firesByYear.forEach((series) => {
    const color = series.type === 'Prescribed Burn' ? palette.colors.prescribedBurn : palette.colors.wildfire;
    yearlyMarks.push(Plot.lineY(series.points, { x: 'year', y: 'count', stroke: color, strokeWidth: 2.5, curve: 'natural', tip: true }));
    yearlyMarks.push(Plot.dot(series.points, { x: 'year', y: 'count', fill: color, r: 3 }));
    if (series.trend) {
      yearlyMarks.push(Plot.lineY(series.trend, { x: 'year', y: 'trend', stroke: color, strokeDasharray: '4,4', strokeOpacity: 0.8 }));
    }
  });
  mount('fires-by-year', Plot.plot({
    width: width('fires-by-year'), height: 300, marginLeft: 60,
    y: { label: 'Number of fires', grid: true },
    x: { label: null, tickFormat: 'd', ticks: decadeTicks },
    color: { legend: true, ...palette.fireType },
    marks: [...yearlyMarks, Plot.ruleY([0])],
  }));

  const areaRows = data.areaBurntByYear.flatMap((series) => series.points);
  mount('area-burnt', Plot.plot({
    width: width('area-burnt'), height: 300, marginLeft: 80,
    y: { label: 'Area burnt (hectares)', grid: true, tickFormat: '~s' },
    x: { label: null, tickFormat: 'd', ticks: decadeTicks },
    color: { legend: true, ...palette.fireType },
    marks: [
      Plot.areaY(areaRows, { x: 'year', y: 'area', fill: 'type', fillOpacity: 0.6, tip: true }),
      Plot.lineY(areaRows, { x: 'year', y: 'area', stroke: 'type', strokeWidth: 2 }),
      Plot.ruleY([0]),
    ],
  }));

  const topPeriods = new Set(data.intensePeriods.top.map((d) => d.period));
  mount('intense-periods', Plot.plot({
    width: width('intense-periods'), height: 400, marginTop: 50, marginLeft: 100, marginBottom: 60,
    x: { label: '5-Year Period', tickRotate: -45 },
    y: { label: 'Total Area Burnt (hectares)', grid: true, tickFormat: '~s' },
    marks: [
      Plot.barY(data.intensePeriods.periods, {
        x: 'period', y: 'totalArea', inset: 5, tip: true,
        fill: (d) => topPeriods.has(d.period) ? palette.colors.accent1 : palette.colors.periodMuted,
      }),
      Plot.ruleY([0]),
      Plot.dot(data.intensePeriods.top, { x: 'period', y: 'totalArea', r: 5, fill: palette.colors.wildfire, stroke: 'white', strokeWidth: 2 }),
      Plot.text(data.intensePeriods.top, { x: 'period', y: 'totalArea', text: (d) => `${(d.totalArea / 1e6).toFixed(1)}M ha`, dy: -20, fontWeight: 'bold', fill: palette.colors.wildfire }),
      Plot.text(data.intensePeriods.top, { x: 'period', y: 'totalArea', text: 'context', dy: -40, fontSize: 8.5, fontStyle: 'italic', lineWidth: 18 }),
    ],
  }));

  mount('seasonal-heatmap', Plot.plot({
    width: width('seasonal-heatmap'), height: 300, marginLeft: 50,
    x: { label: null, tickFormat: (d) => monthNames[d], domain: d3.range(12), padding: 0 },
    y: { label: null, reverse: true, tickFormat: 'd', padding: 0 },
    color: { type: 'threshold', legend: true, label: 'Fires per month', ...palette.heatmap },
    marks: [
      Plot.cell(data.seasonalHeatmap, { x: 'month', y: 'year', fill: 'count', tip: true }),
      Plot.text(data.seasonalHeatmap, { x: 'month', y: 'year', text: 'count', fill: 'white', fontSize: 10, fontWeight: 'bold' }),
    ],
  }));

  mount('big-fires', Plot.plot({
    width: width('big-fires'), height: 450, marginLeft: 60, marginBottom: 60,
    x: { label: 'Month', domain: d3.range(1, 13), tickFormat: (d) => monthNames[d - 1] },
    y: { label: 'Year', grid: true, tickFormat: 'd' },
    r: { range: [3, 25] },
    marks: [
      Plot.dot(data.bigFires.points, {
        x: 'month', y: 'year', r: 'areaHa', fill: palette.colors.wildfire, fillOpacity: 0.6, stroke: palette.colors.wildfire,
        title: (d) => `${d.name}\\n${d.year}\\nArea: ${d.areaHa.toLocaleString()} ha`,
      }),
      Plot.text(data.bigFires.annotations, { x: 'month', y: (d) => d.year - 6, text: 'displayName', dy: -90, fontWeight: 'bold', fill: palette.colors.accent2, lineWidth: 18 }),
      Plot.text(data.bigFires.annotations, { x: 'month', y: (d) => d.year - 6, text: 'context', dy: -74, fontSize: 8.5, fontStyle: 'italic', lineWidth: 20 }),
    ],
  }));

  document.getElementById('hotspots-meta').textContent = `Top suburbs by fire count (every ${data.regionalHotspots.stride}th fire sampled).`;
  mount('regional-hotspots', Plot.plot({
    width: width('regional-hotspots'), height: 300, marginLeft: 170, marginRight: 40,
    x: { label: 'Number of fires', grid: true },
    y: { label: null },
    marks: [
      Plot.barX(data.regionalHotspots.rows, { x: 'count', y: 'location', fill: palette.colors.accent1, sort: { y: '-x' }, tip: true }),
      Plot.ruleX([0]),
    ],
  }));

  mount('fires-2025', Plot.plot({
    width: width('fires-2025'), marginLeft: 200, marginBottom: 50,
    x: { label: 'Number of fires', grid: true },
    y: { label: null },
    marks: [
      Plot.barX(data.firesByLocation2025, { y: 'label', x: 'count', fill: '#ff6b6b', tip: true, sort: { y: '-x' } }),
      Plot.text(data.firesByLocation2025, { y: 'label', x: 'count', text: (d) => String(d.count), textAnchor: 'start', dx: 5 }),
    ],
  }));

  const levelColors = { CRITICAL: '#dc2626', MAJOR: '#ea580c', HIGH: '#eab308' };
  const topFires = document.getElementById('top-fires');
  data.topLargestFires.forEach((fire) => {
    const entry = document.createElement('div');
    entry.className = 'fire-entry';
    const content = document.createElement('div');
    const title = document.createElement('h3');
    title.textContent = `${fire.name} (${fire.year}) `;
    const badge = document.createElement('span');
    badge.className = 'badge';
    badge.style.background = levelColors[fire.impactLevel];
    badge.textContent = fire.impactLevel;
    title.appendChild(badge);
    const summary = document.createElement('p');
    summary.textContent = fire.summary;
    const stats = document.createElement('div');
    stats.className = 'stats';
    stats.innerHTML = `<span style='color:${palette.colors.accent3}'>▣ ${d3.format(',.0f')(fire.area)} ha</span>`
      + `<span>• ${fire.deaths} ${fire.deaths === 1 ? 'death' : 'deaths'}</span>`
      + `<span>■ ${fire.homes} homes</span>`
      + (fire.injuries > 0 ? `<span>+ ${fire.injuries} injured</span>` : '');
    content.append(title, summary, stats);
    entry.appendChild(content);
    if (fire.longitude && fire.latitude) {
      entry.appendChild(Plot.plot({
        width: 120, height: 120, margin: 0, style: { background: 'transparent' },
        projection: { type: 'mercator', domain: suburbs, inset: 2 },
        marks: [
          Plot.geo(suburbs, { stroke: '#ddd', strokeWidth: 0.3, fill: '#2a2a38' }),
          Plot.dot([fire], { x: 'longitude', y: 'latitude', fill: palette.colors.wildfire, r: 7, stroke: 'white', strokeWidth: 2.5 }),
        ],
      }));
    }
    topFires.appendChild(entry);
  });
</script>
</body>
</html>
"""
    html_path.write_text(html_template, encoding='utf-8')
    print(f"✔️  Wrote {html_path}")
    return html_path


def main() -> None:
    fires = load_fires()
    suburbs = load_suburbs()
    payload = build_payload(fires, suburbs)
    write_data_js(payload)
    write_suburbs_js(suburbs)
    write_dashboard_html()


if __name__ == '__main__':
    main()
