"""Fixed tables: the room registry and the quick-issue templates."""

from __future__ import annotations

from dataclasses import dataclass

from room_inspection.models import Grade, Team


@dataclass(frozen=True)
class FloorPlan:
    floor: int
    start: int
    end: int
    skip: tuple[int, ...] = ()


FLOORS = (
    FloorPlan(floor=2, start=201, end=213),
    FloorPlan(floor=3, start=301, end=313),
    FloorPlan(floor=4, start=401, end=412, skip=(404,)),
    FloorPlan(floor=5, start=501, end=513, skip=(511,)),
)


def generate_rooms(floors: tuple[FloorPlan, ...] = FLOORS) -> tuple[str, ...]:
    return tuple(
        str(number)
        for plan in floors
        for number in range(plan.start, plan.end + 1)
        if number not in plan.skip
    )


ROOM_REGISTRY = generate_rooms()


def is_known_room(room_id: str) -> bool:
    return room_id in ROOM_REGISTRY


@dataclass(frozen=True)
class QuickIssue:
    label: str
    grade: Grade
    description: str


QUICK_ISSUES: dict[Team, tuple[QuickIssue, ...]] = {
    Team.BED: (
        QuickIssue("遺留物/垃圾", Grade.A, "含自身用品/衣物/垃圾 (考核:不通過)"),
        QuickIssue("毛髮/碎屑/蟲屍", Grade.A, "地板/抽屜明顯可見 (考核:不通過)"),
        QuickIssue("備品未補/全空", Grade.A, "器皿/拖鞋/水全空 (考核:不通過)"),
        QuickIssue("冰箱/器皿髒污", Grade.A, "內部污漬/杯具有水痕 (考核:不通過)"),
        QuickIssue("陽台/戶外區髒污", Grade.A, "家具/地板/欄杆髒 (考核:不通過)"),
        QuickIssue("鋪床污漬/破損", Grade.A, "床單/被套有髒污 (考核:不通過)"),
        QuickIssue("備品過期", Grade.B, "食品/飲料過期 (考核:-10分)"),
        QuickIssue("高處/死角灰塵", Grade.B, "樓梯/檻燈/角落積塵 (考核:-10分)"),
        QuickIssue("鋪床不美觀/皺摺", Grade.C, "大於A5紙皺摺/不平 (考核:-2分)"),
        QuickIssue("衣架/保險箱失誤", Grade.C, "數量不對/收納錯誤/有雜物 (考核:-2分)"),
        QuickIssue("枕頭/抱枕擺放", Grade.C, "方向錯誤/凌亂 (考核:-2分)"),
        QuickIssue("空調/燈光未重置", Grade.C, "溫度風量/門口燈 (考核:-2分)"),
        QuickIssue("衛生紙/備品微調", Grade.C, "無三角形/污漬/未補滿 (考核:-2分)"),
    ),
    Team.WATER: (
        QuickIssue("熱水壺/杯盤髒污", Grade.A, "水漬/茶垢/破損 (考核:不通過)"),
        QuickIssue("馬桶汙垢/尿漬", Grade.A, "未清潔乾淨 (考核:不通過)"),
        QuickIssue("浴池青苔/髒汙", Grade.A, "內部/溢流區未刷 (考核:不通過)"),
        QuickIssue("排水孔毛髮/異味", Grade.A, "堵塞/有垃圾 (考核:不通過)"),
        QuickIssue("鏡面/玻璃嚴重水痕", Grade.A, "光照有明顯痕跡 (考核:不通過)"),
        QuickIssue("地板濕滑/積水", Grade.A, "未擦乾 (考核:不通過)"),
        QuickIssue("垃圾桶未清", Grade.A, "生理桶/垃圾桶有垃圾 (考核:不通過)"),
        QuickIssue("嚴重水垢堆積", Grade.B, "溢流牆/出水口 (考核:-10分)"),
        QuickIssue("溫泉水質/溫度", Grade.B, "雜質/過高過低 (考核:-10分)"),
        QuickIssue("高處/死角蜘蛛網", Grade.B, "九宮格窗/天花板/出風口 (考核:-10分)"),
        QuickIssue("備品補充/復歸", Grade.C, "捲筒紙/洗手乳距離/毛巾 (考核:-3~-5分)"),
        QuickIssue("五金水垢/皂垢", Grade.C, "水龍頭/洗手乳瓶底 (考核:-2分)"),
        QuickIssue("設備歸位微調", Grade.C, "蓮蓬頭/木桶/水塞 (考核:-2分)"),
    ),
}
