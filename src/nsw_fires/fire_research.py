"""Casualty and property-loss notes for the largest NSW fires.

Keys follow the ``"<FireName> (<start year>)"`` label built by the ranking
pipeline; ``injuries`` is ``None`` where no figure was published.
"""

FIRE_RESEARCH = {
    'Gospers Mountain (2019)': {
        'deaths': 0,
        'homes': 90,
        'injuries': None,
        'cause': 'Lightning strike in inaccessible bushland',
        'summary': (
            'Started by a single lightning strike but grew significantly (130,000+ ha) due to escaped '
            'backburning operations. Generated pyrocumulonimbus clouds and merged with 5 other fires into a '
            "megablaze exceeding 1 million hectares. Threatened Sydney's northern suburbs."
        ),
    },
    'Currowan 2 (2019)': {
        'deaths': 3,
        'homes': 312,
        'injuries': 1,
        'cause': 'Lightning strike in drought-affected bushland',
        'summary': (
            "Known as 'The Forever Fire' for its 74-day duration. 89 homes destroyed in Conjola Park on "
            "New Year's Eve. All 3 deaths occurred at Lake Conjola area."
        ),
    },
    'Badja Forest Rd, Countegany (2019)': {
        'deaths': 6,
        'homes': 418,
        'injuries': None,
        'cause': 'Lightning strike in Badja State Forest',
        'summary': (
            'Traveled 40km in hours under catastrophic conditions. Flame heights 15-20 meters. Deaths included '
            'firefighter Colin Burns and father-son Robert & Patrick Salway defending their farm. 60% of Bega '
            'Valley Shire burned.'
        ),
    },
    'Dunns Road (2019)': {
        'deaths': 1,
        'homes': 186,
        'injuries': None,
        'cause': 'Lightning strike in pine plantation',
        'summary': (
            "Ran 85km in two days. David Harrison (47) died defending friend's property near Batlow. Merged "
            'into 600,000-hectare megafire. Heritage-listed Kiandra Courthouse destroyed.'
        ),
    },
    'Green Wattle Creek (2019)': {
        'deaths': 2,
        'homes': 40,
        'injuries': 5,
        'cause': 'Lightning strikes in Burragorang Valley',
        'summary': (
            "Killed volunteer firefighters Geoffrey Keaton (32) and Andrew O'Dwyer (36) when tree struck their "
            "tanker. Nearly destroyed Balmoral village. Burned through Sydney's water catchment area."
        ),
    },
    'Carrai Creek (2019)': {
        'deaths': 1,
        'homes': 90,
        'injuries': None,
        'cause': 'Lightning strike',
        'summary': (
            "Barry Parsons died fleeing during 'firestorm' conditions. Burned through wilderness with poorly "
            'maintained fire trails. Significant koala habitat destroyed; 71% population decline documented.'
        ),
    },
    'Green Valley, Talmalmo (2019)': {
        'deaths': 1,
        'homes': 8,
        'injuries': 2,
        'cause': 'Lightning strike',
        'summary': (
            'Volunteer firefighter Samuel McPaul (28) killed when pyrocumulonimbus collapse overturned his '
            'truck. Fire ran 85km before jumping Murray River into Victoria. Low home loss due to sparse '
            'population.'
        ),
    },
    'Yarrowlumla S44 (2003)': {
        'deaths': 4,
        'homes': 470,
        'injuries': 490,
        'cause': 'Lightning strike',
        'summary': (
            'Part of 2003 Canberra fires. Created first documented fire tornado in Australia. 45km fire runs in '
            "one day with 50-60 meter flame heights. 'Black Saturday' firestorm hit Canberra suburbs."
        ),
    },
    'Kosciuszko (2003)': {
        'deaths': 4,
        'homes': 551,
        'injuries': 490,
        'cause': 'Lightning strikes (44 fires ignited)',
        'summary': (
            'Part of 2003 Alps fires during worst drought in 103 years. Area represents entire VIC-NSW-ACT '
            'complex. Fire came within meters of Perisher lodges. $121M tourism losses projected.'
        ),
    },
    'Unnamed (1974)': {
        'deaths': 6,
        'homes': 40,
        'injuries': None,
        'cause': 'Lightning strikes after heavy rainfall',
        'summary': (
            'Largest bushfire event ever recorded in Australia, burning 15% of the continent. NSW component: '
            '3.5M hectares including the Moolah-Corinya fire. Mostly in unpopulated interior. 57,000 livestock '
            'killed.'
        ),
    },
}
