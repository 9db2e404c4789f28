# backend/scripts/seed_demo.py
from __future__ import annotations

import argparse
import random
import sys
from datetime import datetime
from pathlib import Path

from sqlalchemy import create_engine, delete, func, select
from sqlalchemy.orm import sessionmaker

# Permet de lancer le script depuis backend/ sans souci d'import
BACKEND_DIR = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(BACKEND_DIR))

from objectifs.core.security import hash_password
from objectifs.core.settings import settings
from objectifs.models import (
    STATUS_EN_COURS,
    STATUS_VALIDE,
    BusinessUnit,
    Categorie,
    Commentaire,
    Objectif,
    Role,
    User,
)


# ---- Données de démo (organisation de conseil) ----
BUSINESS_UNITS = ["Data & IA", "Cloud & DevOps", "Conseil Métier"]

GLOBAL_CATEGORIES = [
    ("Certification", "Obtenir une certification reconnue", "📜"),
    ("Formation", "Monter en compétence sur un sujet", "🎓"),
    ("Commercial", "Contribuer à l’avant-vente", "💼"),
    ("Management", "Encadrer ou accompagner", "🤝"),
    ("Communauté", "Partager : meetups, articles, talks", "🗣️"),
]

OBJECTIFS = {
    "Certification": ["Passer la certification AWS Solutions Architect", "Obtenir la certification Scrum Master",
                      "Valider la certification Azure Data Engineer"],
    "Formation": ["Suivre une formation Kubernetes avancée", "Apprendre Rust", "Se former à dbt"],
    "Commercial": ["Participer à deux réponses d’appel d’offres", "Animer une démo client"],
    "Management": ["Parrainer un nouvel arrivant", "Encadrer un stagiaire"],
    "Communauté": ["Publier un article technique", "Présenter un talk en meetup interne"],
}

COMMENTAIRES = [
    "Bon avancement, on en reparle au prochain point.",
    "Peux-tu préciser la date cible ?",
    "Objectif atteint, bravo !",
    "À découper en étapes plus petites.",
]

DEMO_PASSWORD = "demo1234"


def seed(reset: bool, consultants_per_bum: int, objectifs_per_consultant: int) -> None:
    engine = create_engine(settings.DATABASE_URL_SYNC, future=True)
    SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)

    year = datetime.now().year
    hashed = hash_password(DEMO_PASSWORD)

    with SessionLocal() as db:
        if reset:
            # ordre inverse des FK
            db.execute(delete(Commentaire))
            db.execute(delete(Objectif))
            db.execute(delete(Categorie))
            db.execute(delete(User))
            db.execute(delete(BusinessUnit))
            db.commit()
            print("✅ Reset done (all demo data deleted).")

        if db.execute(select(func.count(User.id))).scalar_one() > 0:
            print("ℹ️  Users already present: use --reset to reseed.")
            return

        admin = User(username="admin", password=hashed, role=Role.ADMIN.value, email="admin@example.com")
        db.add(admin)

        categories = []
        for i, (nom, description, icone) in enumerate(GLOBAL_CATEGORIES, start=1):
            cat = Categorie(
                nom=nom,
                description=description,
                couleur=settings.DEFAULT_CATEGORY_COLORS[(i - 1) % len(settings.DEFAULT_CATEGORY_COLORS)],
                ordre=i,
                icone=icone,
            )
            db.add(cat)
            categories.append(cat)
        db.flush()

        consultants_count = 0
        objectifs_count = 0

        for b, bu_nom in enumerate(BUSINESS_UNITS, start=1):
            bu = BusinessUnit(nom=bu_nom)
            db.add(bu)
            db.flush()

            bum = User(
                username=f"bum{b}",
                password=hashed,
                role=Role.BUM.value,
                email=f"bum{b}@example.com",
                business_unit_id=bu.id,
            )
            db.add(bum)
            db.flush()

            for c in range(1, consultants_per_bum + 1):
                consultant = User(
                    username=f"consultant{b}{c}",
                    password=hashed,
                    role=Role.CONSULTANT.value,
                    email=f"consultant{b}{c}@example.com",
                    business_unit_id=bu.id,
                    bum_id=bum.id,
                )
                db.add(consultant)
                db.flush()
                consultants_count += 1

                for _ in range(objectifs_per_consultant):
                    cat = random.choice(categories)
                    validated = random.random() < 0.35
                    obj = Objectif(
                        description=random.choice(OBJECTIFS[cat.nom]),
                        status=STATUS_VALIDE if validated else STATUS_EN_COURS,
                        validatedbyadmin=validated,
                        annee=random.choice([year, year, year - 1]),
                        user_id=consultant.id,
                        categorie_id=cat.id,
                    )
                    db.add(obj)
                    db.flush()
                    objectifs_count += 1

                    # parfois un échange consultant / BUM (pour démo)
                    if random.random() < 0.5:
                        db.add(Commentaire(contenu=random.choice(COMMENTAIRES), objectif_id=obj.id, user_id=bum.id))

        db.commit()

        print("✅ Seed terminé.")
        print(f"   - Business Units: {len(BUSINESS_UNITS)}")
        print(f"   - Consultants: {consultants_count}")
        print(f"   - Objectifs: {objectifs_count}")
        print(f"   - Mot de passe de tous les comptes: {DEMO_PASSWORD}")


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--reset", action="store_true", help="Supprime les données demo avant de reseed")
    parser.add_argument("--consultants", type=int, default=4, help="Consultants par BUM")
    parser.add_argument("--objectifs", type=int, default=3, help="Objectifs par consultant")
    parser.add_argument("--seed", type=int, default=42, help="Seed RNG pour reproductibilité")
    args = parser.parse_args()

    random.seed(args.seed)
    seed(reset=args.reset, consultants_per_bum=args.consultants, objectifs_per_consultant=args.objectifs)


if __name__ == "__main__":
    main()
