from .conv import (
    parse_timestamp,
    quantize_money,
    to_bool_lenient,
    to_dec_strict,
    to_int_strict,
    to_price,
)

__all__ = [
    "parse_timestamp",
    "quantize_money",
    "to_bool_lenient",
    "to_dec_strict",
    "to_int_strict",
    "to_price",
]
