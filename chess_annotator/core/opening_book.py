# chess_annotator/core/opening_book.py
"""
The static opening database used by the opening classifier.

Every prefix is a whitespace-joined SAN sequence starting from move 1. Order
matters: ties between equally long matches go to the entry scanned first.
"""

from dataclasses import dataclass, field
from typing import Final, Tuple


@dataclass(frozen=True, slots=True)
class OpeningVariation:
    moves: str; name: str


@dataclass(frozen=True, slots=True)
class Opening:
    moves: str; name: str
    variations: Tuple[OpeningVariation, ...] = field(default_factory=tuple)


def _variations(*entries: Tuple[str, str]) -> Tuple[OpeningVariation, ...]:
    return tuple(OpeningVariation(moves, name) for moves, name in entries)


OPENINGS: Final[Tuple[Opening, ...]] = (
    Opening("e4", "王翼开局", _variations(
        ("e4 e5", "开放式对局"),
        ("e4 e5 Nf3", "国王骑士开局"),
        ("e4 e5 Nf3 Nc6", "四骑士开局前奏"),
        ("e4 e5 Nf3 Nc6 Nc3", "四骑士开局"),
        ("e4 e5 Nf3 Nc6 Bc4", "意大利开局"),
        ("e4 e5 Nf3 Nc6 Bb5", "西班牙开局"),
        ("e4 e5 Nf3 Nc6 d4", "苏格兰开局"),
        ("e4 e5 Nf3 Nc6 d4 exd4", "苏格兰开局：正统变例"),
        ("e4 e5 Nf3 Nc6 d4 exd4 Nxd4", "苏格兰开局：施密特变例"),
        ("e4 e5 Nf3 Nc6 d4 exd4 c3", "苏格兰开局：弃兵变例"),
        ("e4 e5 Nf3 Nc6 d4 exd4 c3 dxc3", "苏格兰开局：弃兵变例，接受"),
        ("e4 e5 Nf3 Nc6 d4 exd4 c3 d3", "苏格兰开局：弃兵变例，米埃塞斯防御"),
        ("e4 c5", "西西里防御"),
        ("e4 c5 Nf3", "西西里防御：开放变例"),
        ("e4 c5 Nf3 d6", "西西里防御：纳杰多夫变例"),
        ("e4 c5 Nf3 Nc6", "西西里防御：老西西里变例"),
        ("e4 c5 c3", "西西里防御：阿拉平变例"),
        ("e4 e6", "法国防御"),
        ("e4 e6 d4", "法国防御：正统变例"),
        ("e4 e6 d4 d5", "法国防御：正统变例"),
        ("e4 e6 d4 d5 e5", "法国防御：前进变例"),
        ("e4 e6 d4 d5 Nc3", "法国防御：温科维茨变例"),
        ("e4 c6", "卡罗-卡恩防御"),
    )),
    Opening("d4", "后翼开局", _variations(
        ("d4 d5", "后兵开局"),
        ("d4 d5 c4", "后翼兵种开局"),
        ("d4 d5 c4 e6", "后翼兵种开局：正统变例"),
        ("d4 d5 c4 c6", "斯拉夫防御"),
        ("d4 d5 c4 dxc4", "后翼兵种开局：接受变例"),
        ("d4 Nf6", "印度防御"),
        ("d4 Nf6 c4", "印度防御系统"),
        ("d4 Nf6 c4 e6", "波哥柳波夫防御"),
        ("d4 Nf6 c4 g6", "国王印度防御"),
        ("d4 Nf6 c4 g6 Nc3 Bg7", "国王印度防御：正统变例"),
        ("d4 Nf6 c4 e6 Nf3 b6", "印度防御：尼姆佐维奇变例"),
    )),
    Opening("c4", "英国开局", _variations(
        ("c4 e5", "英国对称开局"),
        ("c4 c5", "英国对称变例"),
        ("c4 Nf6", "英国开局：印度防御"),
        ("c4 e6", "英国开局：阿加塔变例"),
    )),
    Opening("Nf3", "雷蒂开局", _variations(
        ("Nf3 d5", "雷蒂开局：王翼攻击"),
        ("Nf3 Nf6", "雷蒂开局：对称变例"),
        ("Nf3 c5", "雷蒂开局：英国变例"),
    )),
    Opening("e4 d5", "斯堪的纳维亚防御", _variations(
        ("e4 d5 exd5", "斯堪的纳维亚防御：接受变例"),
        ("e4 d5 Nc3", "斯堪的纳维亚防御：现代变例"),
    )),
    Opening("e4 Nf6", "阿列欣防御", _variations(
        ("e4 Nf6 e5", "阿列欣防御：前进变例"),
        ("e4 Nf6 Nc3", "阿列欣防御：四骑士变例"),
    )),
)
