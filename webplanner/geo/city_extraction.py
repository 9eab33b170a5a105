"""City extraction from free-text destinations.

Patterns are grouped by province and evaluated in declaration order; the
first group that matches anywhere in the text wins. Inside a group the
leftmost city mention wins.
"""

from __future__ import annotations

import re
from typing import Pattern


def _group(*cities: str) -> Pattern[str]:
    # Every city may be written with or without the trailing 市.
    alternatives = "|".join(f"{re.escape(city)}市?" for city in cities)
    return re.compile(f"({alternatives})")


CITY_PATTERNS: tuple[tuple[str, Pattern[str]], ...] = (
    ("municipalities", re.compile(r"(北京市|北京|上海市?|天津市?|重庆市?)")),
    (
        "jiangsu",
        _group(
            "南京", "杭州", "苏州", "无锡", "常州", "镇江", "扬州",
            "南通", "泰州", "盐城", "淮安", "连云港", "宿迁", "徐州",
        ),
    ),
    (
        "guangdong",
        _group(
            "广州", "深圳", "珠海", "汕头", "佛山", "韶关", "湛江",
            "肇庆", "江门", "茂名", "惠州", "梅州", "汕尾", "河源",
            "阳江", "清远", "东莞", "中山", "潮州", "揭阳", "云浮",
        ),
    ),
    (
        "sichuan",
        _group(
            "成都", "绵阳", "德阳", "南充", "宜宾", "自贡", "乐山",
            "泸州", "达州", "内江", "遂宁", "攀枝花", "眉山", "广安",
            "资阳", "雅安", "巴中",
        ),
    ),
    (
        "hubei",
        _group(
            "武汉", "黄石", "十堰", "宜昌", "襄阳", "鄂州", "荆门",
            "孝感", "荆州", "黄冈", "咸宁", "随州", "恩施",
        ),
    ),
    (
        "shaanxi",
        _group(
            "西安", "铜川", "宝鸡", "咸阳", "渭南", "延安", "汉中",
            "榆林", "安康", "商洛",
        ),
    ),
    (
        "liaoning",
        _group(
            "沈阳", "大连", "鞍山", "抚顺", "本溪", "丹东", "锦州",
            "营口", "阜新", "辽阳", "盘锦", "铁岭", "朝阳", "葫芦岛",
        ),
    ),
    (
        "shandong",
        _group(
            "济南", "青岛", "淄博", "枣庄", "东营", "烟台", "潍坊",
            "济宁", "泰安", "威海", "日照", "临沂", "德州", "聊城",
            "滨州", "菏泽",
        ),
    ),
    (
        "henan",
        _group(
            "郑州", "开封", "洛阳", "平顶山", "安阳", "鹤壁", "新乡",
            "焦作", "濮阳", "许昌", "漯河", "三门峡", "南阳", "商丘",
            "信阳", "周口", "驻马店",
        ),
    ),
    (
        "hunan",
        _group(
            "长沙", "株洲", "湘潭", "衡阳", "邵阳", "岳阳", "常德",
            "张家界", "益阳", "郴州", "永州", "怀化", "娄底", "湘西",
        ),
    ),
)


def extract_city(destination: str) -> str:
    """Extract a city name from a destination string.

    Args:
        destination: Free-text destination such as "南京夫子庙".

    Returns:
        The matched city ("南京", "上海市", ...). When no pattern matches,
        the whole (stripped) input is returned, meaning the lookup will
        not be scoped to a known city.
    """
    if not destination:
        return ""

    for _province, pattern in CITY_PATTERNS:
        match = pattern.search(destination)
        if match:
            return match.group(1)

    return destination.strip()


def normalize_city(city: str) -> str:
    """Drop the administrative 市 suffix ("南京市" -> "南京")."""
    city = city.strip()
    if len(city) > 2 and city.endswith("市"):
        return city[:-1]
    return city
