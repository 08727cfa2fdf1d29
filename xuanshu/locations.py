"""
Birthplace longitude lookup for Chinese provinces and cities.

Used when a profile names a city instead of giving coordinates; the
longitude feeds the true-solar-time correction.
"""

from dataclasses import dataclass

from xuanshu.errors import InvalidBirthData


@dataclass(frozen=True)
class City:
    name: str
    longitude: float
    latitude: float


@dataclass(frozen=True)
class Province:
    name: str
    cities: tuple


CHINA_LOCATIONS = (
    Province("北京", (City("北京", 116.40, 39.90),)),
    Province("天津", (City("天津", 117.20, 39.13),)),
    Province("上海", (City("上海", 121.47, 31.23),)),
    Province("重庆", (City("重庆", 106.55, 29.56),)),
    Province("河北", (
        City("石家庄", 114.48, 38.03), City("唐山", 118.18, 39.63),
        City("保定", 115.47, 38.87), City("邯郸", 114.47, 36.60),
    )),
    Province("山西", (City("太原", 112.55, 37.87), City("大同", 113.30, 40.08))),
    Province("内蒙古", (City("呼和浩特", 111.65, 40.82), City("包头", 109.84, 40.66))),
    Province("辽宁", (City("沈阳", 123.43, 41.80), City("大连", 121.62, 38.92))),
    Province("吉林", (City("长春", 125.35, 43.88), City("吉林", 126.55, 43.84))),
    Province("黑龙江", (City("哈尔滨", 126.63, 45.75), City("齐齐哈尔", 123.97, 47.33))),
    Province("江苏", (
        City("南京", 118.78, 32.04), City("苏州", 120.62, 31.32),
        City("无锡", 120.30, 31.57), City("徐州", 117.18, 34.26),
    )),
    Province("浙江", (
        City("杭州", 120.19, 30.26), City("宁波", 121.56, 29.86),
        City("温州", 120.65, 28.01),
    )),
    Province("安徽", (City("合肥", 117.27, 31.86), City("芜湖", 118.38, 31.33))),
    Province("福建", (City("福州", 119.30, 26.08), City("厦门", 118.10, 24.46))),
    Province("江西", (City("南昌", 115.89, 28.68), City("赣州", 114.93, 25.83))),
    Province("山东", (
        City("济南", 117.00, 36.65), City("青岛", 120.33, 36.07),
        City("烟台", 121.39, 37.52),
    )),
    Province("河南", (City("郑州", 113.65, 34.76), City("洛阳", 112.44, 34.70))),
    Province("湖北", (City("武汉", 114.31, 30.52), City("宜昌", 111.30, 30.70))),
    Province("湖南", (City("长沙", 113.00, 28.21), City("衡阳", 112.61, 26.89))),
    Province("广东", (
        City("广州", 113.23, 23.16), City("深圳", 114.07, 22.62),
        City("汕头", 116.69, 23.39), City("湛江", 110.36, 21.27),
    )),
    Province("广西", (City("南宁", 108.33, 22.84), City("桂林", 110.28, 25.29))),
    Province("海南", (City("海口", 110.35, 20.02), City("三亚", 109.51, 18.25))),
    Province("四川", (City("成都", 104.06, 30.67), City("绵阳", 104.73, 31.48))),
    Province("贵州", (City("贵阳", 106.71, 26.57), City("遵义", 106.92, 27.73))),
    Province("云南", (City("昆明", 102.73, 25.04), City("大理", 100.23, 25.61))),
    Province("西藏", (City("拉萨", 91.11, 29.97),)),
    Province("陕西", (City("西安", 108.95, 34.27), City("宝鸡", 107.15, 34.38))),
    Province("甘肃", (City("兰州", 103.73, 36.03), City("天水", 105.69, 34.60))),
    Province("青海", (City("西宁", 101.74, 36.56),)),
    Province("宁夏", (City("银川", 106.27, 38.47),)),
    Province("新疆", (City("乌鲁木齐", 87.68, 43.77), City("喀什", 75.99, 39.47))),
    Province("香港", (City("香港", 114.17, 22.28),)),
    Province("澳门", (City("澳门", 113.54, 22.19),)),
    Province("台湾", (City("台北", 121.50, 25.03), City("高雄", 120.31, 22.62))),
)

CITY_BY_NAME = {city.name: city for province in CHINA_LOCATIONS for city in province.cities}


def find_city(name: str) -> City:
    """Look up a city by name; a trailing 市 is ignored."""
    key = name.strip()
    city = CITY_BY_NAME.get(key) or CITY_BY_NAME.get(key.removesuffix("市"))
    if city is None:
        raise InvalidBirthData(f"Unknown city: {name}")
    return city


def longitude_for(city: str) -> float:
    return find_city(city).longitude


def cities_in(province: str) -> tuple:
    for p in CHINA_LOCATIONS:
        if p.name == province:
            return p.cities
    raise InvalidBirthData(f"Unknown province: {province}")
