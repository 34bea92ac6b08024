"""
Single-page HTML dashboard.

Static page that polls ``/api/solar-data`` every five seconds and renders
power, daily yield, savings and voltage.  Holds no server-side state.

CHANGELOG:
- 2026-10-18: Initial creation (STORY-011)

TODO:
- None
"""

from fastapi import APIRouter
from fastapi.responses import HTMLResponse

router = APIRouter(tags=["dashboard"])

REFRESH_INTERVAL_MS = 5000

_PAGE = """<!DOCTYPE html>
<html>
<head>
  <title>Huawei Solar Monitor</title>
  <style>
    body { font-family: Arial, sans-serif; margin: 20px; background: #f0f0f0; }
    .dashboard { max-width: 800px; margin: 0 auto; }
    .card { background: white; padding: 20px; margin: 10px 0; border-radius: 8px;
            box-shadow: 0 2px 4px rgba(0,0,0,0.1); }
    .metric { font-size: 24px; font-weight: bold; color: #2196F3; }
    .label { color: #666; margin-bottom: 5px; }
    .error { color: #c62828; }
    h1 { color: #333; }
  </style>
</head>
<body>
  <div class="dashboard">
    <h1>Huawei Solar Monitor</h1>
    <div id="status" class="error"></div>
    <div class="card"><div class="label">Active Power</div>
      <div class="metric" id="power">Loading...</div></div>
    <div class="card"><div class="label">Daily Energy Production</div>
      <div class="metric" id="energy">Loading...</div></div>
    <div class="card"><div class="label">Daily Savings</div>
      <div class="metric" id="savings">Loading...</div></div>
    <div class="card"><div class="label">Potential Revenue</div>
      <div class="metric" id="revenue">Loading...</div></div>
    <div class="card"><div class="label">Voltage</div>
      <div class="metric" id="voltage">Loading...</div></div>
  </div>
  <script>
    async function updateData() {
      const status = document.getElementById('status');
      try {
        const response = await fetch('/api/solar-data');
        const data = await response.json();
        if (!response.ok) {
          status.textContent = 'Inverter unavailable (' + data.detail.stage + ': '
            + data.detail.reason + ')';
          return;
        }
        status.textContent = '';
        document.getElementById('power').textContent = data.active_power_w + ' W';
        document.getElementById('energy').textContent =
          data.costs.energy_produced_kwh.toFixed(2) + ' kWh';
        document.getElementById('savings').textContent =
          '\\u20ac ' + data.costs.daily_savings.toFixed(2);
        document.getElementById('revenue').textContent =
          '\\u20ac ' + data.costs.potential_revenue.toFixed(2);
        document.getElementById('voltage').textContent = data.voltage_v + ' V';
      } catch (err) {
        status.textContent = 'Request failed';
      }
    }
    updateData();
    setInterval(updateData, __REFRESH_MS__);
  </script>
</body>
</html>
""".replace("__REFRESH_MS__", str(REFRESH_INTERVAL_MS))


@router.get("/", response_class=HTMLResponse)
async def dashboard() -> str:
    """Serve the dashboard page."""
    return _PAGE
