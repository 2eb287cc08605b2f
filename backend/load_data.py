"""
Data Loader Script - Seeds sample students into the platform via the API.

Sends each sample student to POST /api/v1/students and prints a summary.
Students that already exist (same email) are reported as duplicates.

Usage:
    python load_data.py                              # Uses default URL
    python load_data.py http://localhost:8000         # Custom API URL
"""

import os
import sys

import httpx

DEFAULT_API_URL = "http://localhost:8000"

SAMPLE_STUDENTS = [
    {"first_name": "John", "last_name": "Doe", "email": "john.doe@example.com",
     "phone_number": "555-010-1001", "date_of_birth": "2001-04-12",
     "city": "Springfield", "state": "IL", "zip_code": "62701", "gpa": 3.45},
    {"first_name": "Jane", "last_name": "Smith", "email": "jane.smith@example.com",
     "phone_number": "555-010-1002", "date_of_birth": "2000-09-30",
     "city": "Madison", "state": "WI", "zip_code": "53703", "gpa": 3.9},
    {"first_name": "Mike", "last_name": "Johnson", "email": "mike.johnson@example.com",
     "phone_number": "(555) 010-1003", "enrollment_status": "Inactive"},
    {"first_name": "Mary-Ann", "last_name": "O'Brien", "email": "maryann.obrien@example.com",
     "phone_number": "+1 555 010 1004", "zip_code": "02134-1234"},
    {"first_name": "Carlos", "last_name": "Rivera", "email": "carlos.rivera@example.com",
     "phone_number": "5550101005", "enrollment_status": "Graduated",
     "enrollment_date": "2019-09-01", "gpa": 3.2},
    {"first_name": "Priya", "last_name": "Patel", "email": "priya.patel@example.com",
     "phone_number": "555.010.1006", "enrollment_status": "Suspended"},
]


def main():
    api_url = sys.argv[1] if len(sys.argv) > 1 else os.getenv("API_URL", DEFAULT_API_URL)
    endpoint = f"{api_url.rstrip('/')}/api/v1/students"

    print(f"Loading {len(SAMPLE_STUDENTS)} students into {endpoint}")

    created = duplicates = failed = 0
    with httpx.Client(timeout=30.0) as client:
        for student in SAMPLE_STUDENTS:
            try:
                resp = client.post(endpoint, json=student)
            except httpx.HTTPError as e:
                print(f"Could not reach the API: {e}")
                sys.exit(1)

            body = resp.json()
            if resp.status_code == 201:
                created += 1
                print(f"  + {body['data']['full_name']} (id {body['data']['id']})")
            elif resp.status_code == 409:
                duplicates += 1
                print(f"  = {student['email']} already exists")
            else:
                failed += 1
                print(f"  ! {student['email']}: HTTP {resp.status_code} {body.get('message')}")

    print("\n" + "=" * 50)
    print("LOAD SUMMARY")
    print("=" * 50)
    print(f"  Created:     {created}")
    print(f"  Duplicates:  {duplicates}")
    print(f"  Failed:      {failed}")
    print("=" * 50)


if __name__ == "__main__":
    main()
