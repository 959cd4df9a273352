"""Partition planning for multipart copy.

Splits an object of known size into the byte ranges copied as individual
parts. The service rejects any part smaller than ``MINIMUM_PART_SIZE``
except the last one, so a short remainder is folded into the preceding part
instead of becoming a part of its own.
"""

from partcopy.errors import InvalidInput
from partcopy.models import PartRange

# 5 MiB: smallest non-final part the service accepts.
MINIMUM_PART_SIZE = 5_242_880

DEFAULT_PART_SIZE = 50_000_000

# Service limit on the number of parts in one multipart upload.
MAX_PARTS = 10_000


def plan_partitions(
    object_size: int,
    part_size: int | None = None,
    minimum_part_size: int = MINIMUM_PART_SIZE,
) -> list[PartRange]:
    """Compute the ordered byte ranges covering ``[0, object_size - 1]``.

    Args:
        object_size: Size of the source object in bytes.
        part_size: Target part size, or None for ``DEFAULT_PART_SIZE``.
        minimum_part_size: Smallest size allowed for a non-final part.

    Returns:
        Contiguous, non-overlapping ranges numbered 1..N in offset order.

    Raises:
        InvalidInput: If ``object_size`` is not positive, ``part_size`` is
            below ``minimum_part_size``, or the plan exceeds ``MAX_PARTS``.
    """
    if part_size is None:
        part_size = DEFAULT_PART_SIZE
    if object_size <= 0:
        raise InvalidInput(f"Object size must be positive, got {object_size}")
    if part_size < minimum_part_size:
        raise InvalidInput(
            f"Part size {part_size} is below the minimum of {minimum_part_size} bytes"
        )

    count, remainder = divmod(object_size, part_size)

    # Smaller than a part and too small to stand alone: one part, whole object.
    if count == 0 and remainder < minimum_part_size:
        return [PartRange(part_number=1, start=0, end=object_size - 1)]

    total = count + 1 if remainder >= minimum_part_size else count
    if total > MAX_PARTS:
        raise InvalidInput(
            f"Copy would need {total} parts, more than the limit of {MAX_PARTS}; "
            "use a larger part size"
        )

    ranges: list[PartRange] = []
    for index in range(count):
        start = index * part_size
        end = start + part_size - 1
        if index == count - 1 and remainder < minimum_part_size:
            end += remainder
        ranges.append(PartRange(part_number=index + 1, start=start, end=end))

    if remainder >= minimum_part_size:
        start = count * part_size
        ranges.append(PartRange(part_number=count + 1, start=start, end=start + remainder - 1))

    return ranges
