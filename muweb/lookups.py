"""Static id -> display name tables for the game client data."""

CLASS_NAMES = {
    0: "Dark Wizard", 1: "Soul Master", 2: "Grand Master", 3: "Soul Wizard",
    16: "Dark Knight", 17: "Blade Knight", 18: "Blade Master", 19: "Dragon Knight",
    32: "Fairy Elf", 33: "Muse Elf", 34: "High Elf", 35: "Noble Elf",
    48: "Magic Gladiator", 49: "Duel Master",
    64: "Dark Lord", 65: "Lord Emperor",
    80: "Summoner", 81: "Bloody Summoner", 82: "Dimension Master",
    96: "Rage Fighter", 97: "Fist Blazer", 98: "Fist Master",
    112: "Grow Lancer", 113: "Mirage Lancer",
    128: "Rune Wizard", 129: "Rune Spell Master", 130: "Grand Rune Master",
    144: "Slayer", 145: "Royal Slayer", 146: "Master Slayer",
    160: "Gun Crusher", 161: "Gun Breaker", 162: "Master Gun Breaker",
    176: "Light Wizard", 177: "Shine Wizard", 178: "Luminous Wizard",
    192: "Lemuria", 193: "War Lemuria", 194: "Arch Lemuria",
    208: "Illusion Knight", 209: "Mirage Knight",
}

MAP_NAMES = {
    0: "Lorencia",
    1: "Dungeon",
    2: "Devias",
    3: "Noria",
    4: "Lost Tower",
    5: "Exile",
    6: "Arena",
    7: "Atlans",
    8: "Tarkan",
    9: "Devil Square",
    10: "Icarus",
    11: "Blood Castle 1",
    12: "Blood Castle 2",
    13: "Blood Castle 3",
    14: "Blood Castle 4",
    15: "Blood Castle 5",
    16: "Blood Castle 6",
    17: "Blood Castle 7",
    18: "Chaos Castle 1",
    19: "Chaos Castle 2",
    20: "Chaos Castle 3",
    21: "Chaos Castle 4",
    22: "Chaos Castle 5",
    23: "Chaos Castle 6",
    24: "Kalima 1",
    25: "Kalima 2",
    26: "Kalima 3",
    27: "Kalima 4",
    28: "Kalima 5",
    29: "Kalima 6",
    30: "Valley of Loren",
    31: "Land of Trials",
    32: "Devil Square 2",
    33: "Aida",
    34: "Crywolf Fortress",
    37: "Kanturu 1",
    38: "Kanturu 2",
    39: "Kanturu 3",
    40: "Silent Map",
    41: "Barracks of Balgass",
    42: "Balgass Refuge",
    45: "Illusion Temple 1",
    46: "Illusion Temple 2",
    47: "Illusion Temple 3",
    48: "Illusion Temple 4",
    49: "Illusion Temple 5",
    50: "Illusion Temple 6",
    51: "Elbeland",
    52: "Blood Castle 8",
    53: "Chaos Castle 7",
    56: "Swamp of Calmness",
    57: "Raklion",
    58: "Raklion Boss",
    62: "Santa Village",
    63: "Vulcanus",
    64: "Duel Arena",
    65: "Doppelganger 1",
    66: "Doppelganger 2",
    67: "Doppelganger 3",
    68: "Doppelganger 4",
    69: "Imperial Guardian 1",
    70: "Imperial Guardian 2",
    71: "Imperial Guardian 3",
    72: "Imperial Guardian 4",
    79: "Loren Market",
    80: "Karutan 1",
    81: "Karutan 2",
}

# guild_members.ranking
GUILD_RANKS = {
    0: "Guild Master",
    1: "Assistant",
    2: "Battle Master",
}

UNKNOWN = "Unknown"


def class_name(class_id):
    return CLASS_NAMES.get(class_id, UNKNOWN)


def map_name(map_id):
    return MAP_NAMES.get(map_id, UNKNOWN)


def guild_rank(ranking):
    return GUILD_RANKS.get(ranking, "Member")
