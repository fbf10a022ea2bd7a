# Fallback events, used only while no "events" key exists in storage.

DEFAULT_EVENTS = [
    {
        "id": 1,
        "title": "TechFest 2024",
        "description": "Hackathons, robotics demos and talks from industry engineers.",
        "venue": "Main Auditorium, Government Engineering College",
        "category": "Technical",
        "district": "Thrissur",
        "date": "2024-12-12",
        "time": "09:30",
        "capacity": 500,
        "attendees": 214,
    },
    {
        "id": 2,
        "title": "Onam Cultural Night",
        "description": "Thiruvathira, folk songs and a traditional sadya for students.",
        "venue": "Open Air Theatre",
        "category": "Cultural",
        "district": "Ernakulam",
        "date": "2024-09-05",
        "time": "17:00",
        "capacity": 800,
        "attendees": 640,
    },
    {
        "id": 3,
        "title": "Inter-College Football Cup",
        "description": "Knockout tournament between sixteen college teams.",
        "venue": "University Stadium",
        "category": "Sports",
        "district": "Kozhikode",
        "date": "2024-11-20",
        "time": "08:00",
        "capacity": 1200,
        "attendees": 390,
    },
    {
        "id": 4,
        "title": "Startup Pitch Day",
        "description": "Student founders pitch to angel investors and incubators.",
        "venue": "Innovation Centre, Technopark",
        "category": "Business",
        "district": "Thiruvananthapuram",
        "date": "2024-10-18",
        "time": "10:00",
        "capacity": 150,
        "attendees": 88,
    },
    {
        "id": 5,
        "title": "Machine Learning Workshop",
        "description": "Hands-on introduction to training and evaluating models.",
        "venue": "CS Lab 2",
        "category": "Workshop",
        "district": "Ernakulam",
        "date": "2024-10-02",
        "time": "14:00",
        "capacity": 60,
        "attendees": 57,
    },
    {
        "id": 6,
        "title": "Photography Walk",
        "description": "Guided heritage walk through the old town with a photo contest.",
        "venue": "Fort Kochi Beach",
        "category": "Cultural",
        "district": "Ernakulam",
        "date": "2024-08-25",
        "time": "06:30",
        "capacity": 40,
        "attendees": 31,
    },
]
