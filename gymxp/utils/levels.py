# gymxp/utils/levels.py

from dataclasses import dataclass, asdict


# XP acumulado con el que empieza cada nivel (nivel 1 = índice 0)
LEVEL_THRESHOLDS = (
    0,      # Nivel 1
    100,    # Nivel 2  (+100)
    250,    # Nivel 3  (+150)
    475,    # Nivel 4  (+225)
    813,    # Nivel 5  (+338)
    1320,   # Nivel 6  (+507)
    2080,   # Nivel 7  (+760)
    3220,   # Nivel 8  (+1140)
    4930,   # Nivel 9  (+1710)
    7495,   # Nivel 10 (+2565) -> máximo
)

MAX_LEVEL = len(LEVEL_THRESHOLDS)


@dataclass(frozen=True)
class LevelInfo:
    level: int
    current_level_xp: int
    xp_for_next_level: int

    def to_dict(self) -> dict:
        return asdict(self)


def level_of(total_xp, thresholds=LEVEL_THRESHOLDS) -> LevelInfo:
    """
    Devuelve el nivel para un XP acumulado:
      - nivel k = mayor k con total_xp >= T[k-1]
      - en nivel máximo, current_level_xp y xp_for_next_level quedan a 0
    Nunca lanza; valores negativos o vacíos cuentan como 0.
    """
    xp = max(0, int(total_xp or 0))
    n = len(thresholds)

    level = 1
    for i in range(1, n):
        if xp >= thresholds[i]:
            level = i + 1
        else:
            break

    if level >= n:
        return LevelInfo(level=n, current_level_xp=0, xp_for_next_level=0)

    return LevelInfo(
        level=level,
        current_level_xp=xp - thresholds[level - 1],
        xp_for_next_level=thresholds[level] - thresholds[level - 1],
    )
