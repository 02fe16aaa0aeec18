"""测试数据构造"""

from typing import Any, Dict, Optional


def make_definition(name: str = "LED", pins: Optional[Dict[str, list]] = None,
                    width: int = 80, height: int = 60) -> Dict[str, Any]:
    """元件库 JSON"""
    return {
        "name": name,
        "id": name.lower(),
        "description": "",
        "category": "custom",
        "pins": pins if pins is not None else {
            "side1": [],
            "side2": [{"pinName": "A", "type": "digital_io", "order": 1}],
            "side3": [],
            "side4": [{"pinName": "K", "type": "ground", "order": 1}],
        },
        "dimensions": {"width": width, "height": height},
    }
