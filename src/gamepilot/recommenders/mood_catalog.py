"""
Static mood tables used by the recommenders.

Forecast moods (chill, competitive, ...) drive mood-based recommendations;
persona moods (energetic, focused, ...) drive the ranking engine.
"""

# Forecast mood -> genre -> score; a game takes its best matching genre
FORECAST_GENRE_SCORES = {
    'competitive': {'action': 90, 'shooter': 85, 'fighting': 80, 'sports': 75, 'racing': 70},
    'chill': {'puzzle': 90, 'simulation': 85, 'casual': 80, 'strategy': 70, 'adventure': 65},
    'energetic': {'action': 90, 'platformer': 85, 'racing': 80, 'shooter': 75, 'sports': 70},
    'focused': {'strategy': 90, 'puzzle': 85, 'rpg': 80, 'simulation': 75, 'turn-based': 70},
    'social': {'mmorpg': 90, 'multiplayer': 85, 'party': 80, 'co-op': 75, 'online': 70},
    'creative': {'sandbox': 90, 'building': 85, 'crafting': 80, 'simulation': 75, 'design': 70},
    'story': {'rpg': 90, 'adventure': 85, 'visual-novel': 80, 'narrative': 75, 'interactive-fiction': 70},
    'exploratory': {'open-world': 90, 'adventure': 85, 'exploration': 80, 'survival': 75, 'discovery': 70}
}

# Forecast mood -> tag -> additive bonus
FORECAST_TAG_SCORES = {
    'competitive': {'pvp': 20, 'competitive': 20, 'ranked': 15, 'tournament': 15},
    'chill': {'relaxing': 20, 'casual': 15, 'peaceful': 15, 'zen': 10},
    'energetic': {'fast-paced': 20, 'action-packed': 15, 'intense': 15, 'thrilling': 10},
    'focused': {'strategic': 20, 'tactical': 15, 'deep': 15, 'complex': 10},
    'social': {'multiplayer': 20, 'co-op': 15, 'online': 15, 'community': 10},
    'creative': {'building': 20, 'crafting': 15, 'creation': 15, 'design': 10},
    'story': {'story-rich': 20, 'narrative': 15, 'cinematic': 15, 'plot': 10},
    'exploratory': {'exploration': 20, 'open-world': 15, 'discovery': 15, 'adventure': 10}
}

# Genres and tags that count as a match in reasons and mood_match
FORECAST_MOOD_GENRES = {
    'competitive': ('action', 'shooter', 'fighting', 'sports'),
    'chill': ('puzzle', 'simulation', 'casual', 'strategy'),
    'energetic': ('action', 'platformer', 'racing', 'shooter'),
    'focused': ('strategy', 'puzzle', 'rpg', 'simulation'),
    'social': ('mmorpg', 'multiplayer', 'party', 'co-op'),
    'creative': ('sandbox', 'building', 'crafting', 'simulation'),
    'story': ('rpg', 'adventure', 'visual-novel', 'narrative'),
    'exploratory': ('open-world', 'adventure', 'exploration', 'survival')
}

FORECAST_MOOD_TAGS = {
    'competitive': ('pvp', 'competitive', 'ranked'),
    'chill': ('relaxing', 'casual', 'peaceful'),
    'energetic': ('fast-paced', 'action-packed', 'intense'),
    'focused': ('strategic', 'tactical', 'deep'),
    'social': ('multiplayer', 'co-op', 'online'),
    'creative': ('building', 'crafting', 'creation'),
    'story': ('story-rich', 'narrative', 'cinematic'),
    'exploratory': ('exploration', 'open-world', 'discovery')
}

# Persona mood -> genres associated with it; 'neutral' has none
PERSONA_MOOD_GENRES = {
    'energetic': ('action', 'racing', 'sports'),
    'focused': ('strategy', 'puzzle', 'rpg'),
    'relaxed': ('casual', 'simulation', 'puzzle'),
    'creative': ('simulation', 'casual', 'puzzle'),
    'competitive': ('action', 'sports', 'multiplayer'),
    'social': ('multiplayer', 'casual', 'party'),
    'curious': ('indie', 'puzzle', 'simulation'),
    'nostalgic': ('retro', 'classic', 'arcade'),
    'stressed': ('casual', 'simulation', 'puzzle'),
    'bored': ('action', 'shooter', 'adventure')
}

PERSONA_MOOD_TAGS = {
    'energetic': ('action', 'fast-paced', 'intense', 'exciting'),
    'focused': ('strategic', 'tactical', 'puzzle', 'thinking'),
    'relaxed': ('relaxing', 'casual', 'peaceful', 'cozy'),
    'creative': ('creative', 'building', 'sandbox', 'customization'),
    'competitive': ('competitive', 'challenging', 'pvp', 'skill-based'),
    'social': ('multiplayer', 'co-op', 'social', 'community'),
    'curious': ('exploration', 'open-world', 'discovery', 'adventure'),
    'nostalgic': ('retro', 'classic', 'pixel-art', 'arcade'),
    'stressed': ('relaxing', 'casual', 'peaceful', 'cozy'),
    'bored': ('action', 'fast-paced', 'intense', 'exciting')
}

# Player trait -> game tags that express it
TRAIT_GAME_TAGS = {
    'goal-oriented': ('achievements', 'progression', 'goals'),
    'curious': ('exploration', 'discovery', 'secrets'),
    'cooperative': ('co-op', 'multiplayer', 'team'),
    'competitive': ('pvp', 'competitive', 'ranked'),
    'imaginative': ('creative', 'building', 'sandbox'),
    'analytical': ('strategy', 'tactical', 'puzzle'),
    'relaxed': ('casual', 'relaxing', 'peaceful'),
    'dedicated': ('challenging', 'hardcore', 'grinding')
}

ARCHETYPE_TRAITS = {
    'Achiever': ('goal-oriented', 'dedicated'),
    'Explorer': ('curious', 'imaginative'),
    'Competitor': ('competitive', 'dedicated'),
    'Strategist': ('analytical', 'goal-oriented'),
    'Casual': ('relaxed', 'cooperative')
}

# Mood analysis dimension -> forecast mood
MOOD_TO_FORECAST = {
    'calm': 'chill',
    'competitive': 'competitive',
    'curious': 'exploratory',
    'social': 'social',
    'focused': 'focused'
}
