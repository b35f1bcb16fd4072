"""
Pytest configuration and shared fixtures for the schemalang test suite.
"""

import pytest

from schemalang import parse_schema


SAMPLE_SCHEMA = """\
// Sample schema for the vulnerability dashboard

generator client {
  provider = "prisma-client-js"
}

datasource db {
  provider = "postgresql"
  url      = env("DATABASE_URL")
}

model Organization {
  id        String    @id @default(uuid())
  name      String
  slug      String    @unique
  website   String?   @default("https://example.com") // homepage
  projects  Project[]
  users     User[]
  createdAt DateTime  @default(now())

  @@index([slug])
}

model Project {
  id             String       @id @default(uuid())
  name           String
  organizationId String
  organization   Organization @relation(fields: [organizationId], references: [id], onDelete: Cascade)
  scans          ScanResult[]

  @@unique([organizationId, name])
  @@index([organizationId])
}

model User {
  id             Int           @id @default(autoincrement())
  email          String        @unique
  role           Role          @default(VIEWER)
  tags           String[]
  organizationId String?
  organization   Organization? @relation(fields: [organizationId], references: [id], onDelete: SetNull)
  assignedScans  ScanResult[]  @relation("AssignedTo")

  @@map("users")
}

model ScanResult {
  id         String   @id @default(uuid())
  projectId  String
  project    Project  @relation(fields: [projectId], references: [id], onDelete: Cascade, onUpdate: Cascade)
  assigneeId Int?
  assignee   User?    @relation("AssignedTo", fields: [assigneeId], references: [id])
  rawResult  Json
  severity   Severity @default(HIGH)
}

enum Role {
  ADMIN
  DEVELOPER
  VIEWER
}

enum Severity {
  CRITICAL
  HIGH
  LOW
}
"""


@pytest.fixture
def sample_text():
    return SAMPLE_SCHEMA


@pytest.fixture
def sample_schema():
    return parse_schema(SAMPLE_SCHEMA)
