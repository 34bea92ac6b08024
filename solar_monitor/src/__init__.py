"""
Huawei solar monitor package.

Reads active power, daily energy and phase voltage from a Huawei SUN2000
inverter over Modbus TCP, derives savings / revenue figures from the daily
yield, and serves the latest reading over a small FastAPI app.

CHANGELOG:
- 2026-10-18: Initial creation (STORY-001)

TODO:
- None
"""
