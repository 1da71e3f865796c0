"""Sample extraction payloads and task records for testing.

Payloads mirror what the Firecrawl scrape endpoint returns for an
"extract" format request against the activity schema.
"""

STORY_TIME = {
    "title": "Toddler Story Time",
    "description": "Songs, rhymes and picture books for little ones.",
    "type": "event",
    "category": "education-learning",
    "subcategory": "reading",
    "location": {
        "name": "Ballard Library",
        "address": "5614 22nd Ave NW",
        "city": "Seattle",
    },
    "schedule": {"start_date": "2024-06-05", "start_time": "10:30"},
    "age_groups": ["toddler", "preschool"],
    "pricing": "Free",
    "registration_url": "https://www.spl.org/event/story-time",
}

SOCCER_CAMP = {
    "title": "Summer Soccer Camp",
    "description": "Week-long camp covering dribbling, passing and teamwork.",
    "type": "camp",
    "category": "active-sports",
    "subcategory": "soccer",
    "location": {"name": "Magnuson Park", "city": "Seattle"},
    "schedule": {"start_date": "2024-07-08", "end_date": "2024-07-12"},
    "age_groups": ["school-age"],
    "pricing": "$250 per week",
}

ZOO = {
    "title": "Woodland Park Zoo",
    "type": "attraction",
    "location": {"name": "Woodland Park Zoo", "address": "5500 Phinney Ave N"},
    "pricing": {"type": "paid", "description": "$20 adults, $13 kids"},
}

CHILDRENS_MUSEUM = {
    "title": "Seattle Children's Museum",
    "type": "venue",
    "location": {"name": "Seattle Center Armory"},
}

ART_CLASS = {
    "title": "Little Picassos Art Class",
    "type": "class",
    "location": {"name": "Phinney Center"},
    "schedule": {"start_date": "2024-06-10", "start_time": "16:00"},
}

MISSING_LOCATION = {"title": "Mystery Event", "location": {"address": "somewhere"}}

MISSING_TITLE = {"location": {"name": "Green Lake Park"}}

# Fields of the wrong type, as returned when the model ignores the schema
MISTYPED_LOCATION = {"title": "Discovery Park Walk", "location": "Discovery Park"}

MISTYPED_FIELDS = {
    "title": "  Kite Day  ",
    "description": ["windy", "fun"],
    "type": 7,
    "location": {"name": "Gas Works Park", "city": 98103},
    "schedule": "Saturday mornings",
    "age_groups": "all ages",
    "pricing": 12,
    "registration_url": None,
}

NUMERIC_TITLE = {"title": 42, "location": {"name": "Seattle Center"}}


def scrape_response(activities, credits_used=5):
    """Build a successful Firecrawl scrape response body."""
    return {
        "success": True,
        "data": {
            "extract": {"activities": activities},
            "metadata": {
                "title": "Family Events Calendar",
                "sourceURL": "https://www.parentmap.com/calendar",
                "statusCode": 200,
                "creditsUsed": credits_used,
            },
        },
    }


def task_record(task_id="task-123", status="pending", **overrides):
    """Build a ScrapingTask item as stored in the scraping operations table."""
    item = {
        "PK": f"SOURCE#{overrides.get('source_id', 'parentmap-calendar')}",
        "SK": f"TASK#{task_id}",
        "task_id": task_id,
        "source_id": "parentmap-calendar",
        "source_name": "ParentMap Calendar",
        "base_url": "https://www.parentmap.com",
        "task_type": "full_scrape",
        "priority": "high",
        "target_urls": ["https://www.parentmap.com/calendar"],
        "status": status,
        "created_at": "2024-06-01T06:00:00+00:00",
        "updated_at": "2024-06-01T06:00:00+00:00",
    }
    item.update(overrides)
    return item


def task_message(task_id="task-123", **overrides):
    """Build a task-execution message body."""
    message = {
        "task_id": task_id,
        "source_id": "parentmap-calendar",
        "source_name": "ParentMap Calendar",
        "base_url": "https://www.parentmap.com",
        "task_type": "full_scrape",
        "priority": "high",
        "scheduled_time": "2024-06-01T06:00:00Z",
        "target_urls": ["https://www.parentmap.com/calendar"],
    }
    message.update(overrides)
    return message
